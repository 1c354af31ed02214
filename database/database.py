from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import load_config

# config.yaml database.url, overridden by DATABASE_URL when set
DATABASE_URL = load_config().database.url

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
