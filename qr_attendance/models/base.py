"""Declarative base and mixins shared by the tables."""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional
from qr_attendance import db

def _plain(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value

class BaseModel(db.Model):
    """Integer primary key, creation time and session shortcuts."""
    
    __abstract__ = True
    
    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    
    def save(self) -> 'BaseModel':
        """Add to the session and commit."""
        db.session.add(self)
        db.session.commit()
        return self
    
    def delete(self) -> None:
        db.session.delete(self)
        db.session.commit()
    
    def columns_dict(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        """Column values keyed by column name, datetimes as ISO strings."""
        return {
            column.name: _plain(getattr(self, column.name))
            for column in self.__table__.columns
            if column.name not in exclude
        }
    
    @classmethod
    def get_by_id(cls, id: int) -> Optional['BaseModel']:
        return db.session.get(cls, id)
    
    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'

class TimestampMixin:
    """``updated_at`` bookkeeping for rows that are edited after insert."""
    
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def update(self, commit: bool = True, **fields) -> 'TimestampMixin':
        """Set known attributes; commit unless the caller commits itself."""
        for key, value in fields.items():
            if not hasattr(self, key):
                raise AttributeError(f"{self.__class__.__name__} has no attribute {key!r}")
            setattr(self, key, value)
        
        if commit:
            db.session.commit()
        return self
