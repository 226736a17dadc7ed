from santa.db.models import Base, Draw, DrawPair
from santa.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Base",
    "Draw",
    "DrawPair",
    "SessionLocal",
    "get_session",
    "init_engine",
]
