from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, SmallInteger, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# BIGINT в SQLite не становится автоинкрементным rowid
BigIntegerPK = BigInteger().with_variant(Integer, "sqlite")


class Player(Base):
    __tablename__ = "players"

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True, server_default="")  # id аккаунта
    nickname = Column(String(64), nullable=False, server_default="")
    avatar = Column(String(255), nullable=False, server_default="")
    gender = Column(SmallInteger, nullable=False, server_default="0")
    level = Column(Integer, nullable=False, server_default="1")
    coin = Column(BigInteger, nullable=False, server_default="0")
    diamond = Column(BigInteger, nullable=False, server_default="0")
    online = Column(Boolean, nullable=False, server_default="0")
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)  # мягкое удаление

    def __repr__(self):
        return f"<Player id={self.id} user_id={self.user_id!r}>"
