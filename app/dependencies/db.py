from app.db.session import SessionLocal


def get_db():
    """
    요청마다 DB 세션을 하나 열고, 응답 후 닫습니다.
    Usage:
        def my_route(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
