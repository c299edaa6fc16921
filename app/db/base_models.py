# 모든 모델을 Base.metadata에 등록하기 위한 import
from app.db.base import Base
import app.models.user
import app.models.user_session
import app.models.blocked_token
import app.models.file
