from fastapi import APIRouter, Depends
from hospital_billing.dependencies import get_storage
from hospital_billing.schemas import LoginRequest, LoginResponse, UserOut
from hospital_billing.services.auth_service import auth_service
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Check username/password and return the user's public fields."""
    user = auth_service.authenticate(storage, request.username, request.password)
    return LoginResponse(user=UserOut.model_validate(user))
