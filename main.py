from fastapi import FastAPI

from db import init_db, log_info
from routes.forecast import router as forecast_router

app = FastAPI(title="Payday Forecast")
app.include_router(forecast_router)


@app.on_event("startup")
def startup():
    init_db()
    log_info("Forecast API ready.")


@app.get("/health")
def health():
    return {"status": "ok"}
