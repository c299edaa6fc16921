from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db.upsert import check_dialect

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI가 동기 라우트를 스레드풀에서 실행하므로 필요
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db():
    from app.db.base_models import Base
    check_dialect(engine)
    Base.metadata.create_all(bind=engine)
