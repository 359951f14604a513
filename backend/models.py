from sqlalchemy import create_engine, Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = 'accounts'
    id = Column(Integer, primary_key=True)
    balance = Column(Integer, nullable=False, default=1000)
    history = Column(JSON, nullable=False)  # lista de apostas, mais antiga primeiro
    server_seed = Column(String, nullable=False)
    server_seed_hash = Column(String, nullable=False)
    client_seed = Column(String, default="client-seed")
    nonce = Column(Integer, default=0)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


def make_engine(url: str):
    kwargs = {}
    if url.startswith('sqlite'):
        # o servidor de dev do Flask atende em várias threads
        kwargs['connect_args'] = {'check_same_thread': False}
    return create_engine(url, echo=False, **kwargs)


def make_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine):
    Base.metadata.create_all(engine)
