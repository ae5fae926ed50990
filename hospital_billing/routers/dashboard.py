from fastapi import APIRouter, Depends
from hospital_billing.dependencies import get_storage
from hospital_billing.schemas import DashboardStats
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(storage: DatabaseStorage = Depends(get_storage)):
    """Patient/invoice counts, this month's revenue and the pending bill count."""
    stats = storage.get_dashboard_stats()
    return DashboardStats(
        total_patients=stats["total_patients"],
        total_invoices=stats["total_invoices"],
        monthly_revenue=float(stats["monthly_revenue"]),
        pending_bills=stats["pending_bills"],
    )
