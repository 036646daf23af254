from fastapi import APIRouter

from sensor_dashboard.routers import calibration, datalog, graph, overview, readings, realtime

router = APIRouter()

# include sub-routers
router.include_router(overview.router)
router.include_router(realtime.router)
router.include_router(calibration.router)
router.include_router(datalog.router)
router.include_router(readings.router)
router.include_router(graph.router)
