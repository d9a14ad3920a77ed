from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


DEFAULT_CATEGORIES = [
    ('Work', '#1976D2'),
    ('Personal', '#4CAF50'),
    ('Health', '#FF9800'),
    ('Social', '#9C27B0'),
]

connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False


def ensure_appointment_schema(bind=None) -> None:
    """Add columns introduced after the first release to an existing appointments table."""
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(bind)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('description', 'ALTER TABLE appointments ADD COLUMN description VARCHAR'),
            ('category_id', 'ALTER TABLE appointments ADD COLUMN category_id INTEGER'),
            ('email', 'ALTER TABLE appointments ADD COLUMN email VARCHAR'),
            ('notification_sent', 'ALTER TABLE appointments ADD COLUMN notification_sent BOOLEAN DEFAULT FALSE'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_time_range ON appointments(start_time, end_time)')
            )
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_appointments_pending_start '
                    'ON appointments(notification_sent, start_time)'
                )
            )

        _appointment_schema_checked = True


def seed_default_categories(session_factory=None) -> None:
    from backend.models.category import Category

    db = (session_factory or SessionLocal)()
    try:
        if db.query(Category).first() is None:
            db.add_all(Category(name=name, color=color) for name, color in DEFAULT_CATEGORIES)
            db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
