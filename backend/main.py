import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.routes import appointment_routes, category_routes, notification_routes
from backend.services.notification import build_email_client
from backend.services.scheduler import NotificationScheduler
from backend.storage import build_store

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logging.getLogger('apscheduler').setLevel(logging.WARNING)

app = FastAPI(title='Weekly Agenda API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_services() -> None:
    config.validate_runtime_config()

    try:
        app.state.store = build_store()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    app.state.email_client = build_email_client()

    if config.NOTIFICATIONS_ENABLED:
        scheduler = NotificationScheduler(
            app.state.store,
            app.state.email_client,
            lookahead_minutes=config.NOTIFICATION_LOOKAHEAD_MINUTES,
            interval_seconds=config.NOTIFICATION_INTERVAL_SECONDS,
        )
        scheduler.start()
        app.state.scheduler = scheduler


@app.on_event('shutdown')
def stop_scheduler() -> None:
    scheduler = getattr(app.state, 'scheduler', None)
    if scheduler is not None:
        scheduler.shutdown()


@app.get('/')
def root():
    return {'status': 'Weekly Agenda API Running'}


app.include_router(category_routes.router, prefix='/api/categories')
app.include_router(appointment_routes.router, prefix='/api/appointments')
app.include_router(notification_routes.router, prefix='/api/notifications')
