# gymp2/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from gymp2.config import StoreConfig

Base = declarative_base()


def build_url(config: StoreConfig):
    url = make_url(config.remote_url)
    # a service key do Supabase entra como senha do usuário postgres
    if not url.drivername.startswith("sqlite") and not url.password and config.remote_key:
        url = url.set(password=config.remote_key)
    return url


def create_remote_engine(config: StoreConfig) -> Engine:
    url = build_url(config)
    kwargs = {"future": True}
    if url.drivername.startswith("sqlite"):
        # usado nos testes; as escritas rodam em threads
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
        kwargs["connect_args"] = {"connect_timeout": 5}
    return create_engine(url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
