from fastapi import FastAPI
from stepplan.api.routes import router
from stepplan.db.session import init_db


app = FastAPI(title="StepPlan Multi-Step Planner API", version="0.1.0")
app.include_router(router, prefix="/v1")

@app.on_event("startup")
async def on_startup():
    await init_db()
