import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from medcare.core import config
from medcare.database import Base, SessionLocal, engine, ensure_appointment_schema, seed_reference_data
from medcare.models import appointment, appointment_form, consultation, people, schedule, time_slot  # noqa: F401
from medcare.routes import appointment_routes, availability_routes, form_routes, schedule_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

logger = logging.getLogger(__name__)

app = FastAPI(title='MedCare Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {'loc': list(error.get('loc', ())), 'msg': error.get('msg', ''), 'type': error.get('type', '')}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning('Rejected request to %s: %s', request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': jsonable_errors(exc)},
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        db = SessionLocal()
        try:
            seed_reference_data(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'MedCare Scheduling API Running'}


app.include_router(schedule_routes.router, prefix='/api')
app.include_router(availability_routes.router, prefix='/api')
app.include_router(appointment_routes.router, prefix='/api')
app.include_router(form_routes.router, prefix='/api')


def start_server() -> None:
    import uvicorn

    uvicorn.run(app, host='0.0.0.0', port=8000)


if __name__ == '__main__':
    start_server()
