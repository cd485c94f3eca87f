import time
from typing import Union
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import APIKeyHeader

from config import settings, logger
from db.sample_data import SAMPLE_REQUEST
from models.schemas import (
    CalculationRequest, CalculationResponse, SigRequest,
    SimpleDosing, RangeDosing, ComplexDosing,
)
from services.calculator import calculate
from services.errors import InvalidCalculationInputError
from services.parsing_strategy import FallbackSigInterpreter

router = APIRouter()

# API Key security
api_key_header = APIKeyHeader(name="X-API-Key")

def verify_api_key(api_key: str = Depends(api_key_header)):
    """Verify the API key for protected endpoints."""
    if api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return api_key

def get_interpreter() -> FallbackSigInterpreter:
    """SIG interpreter for one request; no pluggable strategy is configured by default."""
    return FallbackSigInterpreter()

def run_calculation(request: CalculationRequest, interpreter: FallbackSigInterpreter) -> CalculationResponse:
    """Run the calculator and wrap the result with timing."""
    start_time = time.time()
    result = calculate(request, interpreter=interpreter)
    processing_time = (time.time() - start_time) * 1000  # Convert to milliseconds
    logger.info(f"Processed calculation in {processing_time:.2f}ms")
    return CalculationResponse(
        success=True,
        result=result,
        processing_time_ms=processing_time
    )

@router.get("/", tags=["Info"])
async def root():
    """API info endpoint."""
    return {
        "name": "Prescription Dispense Calculator API",
        "version": "1.0.0",
        "status": "operational"
    }

@router.post("/parse-sig/", response_model=Union[SimpleDosing, RangeDosing, ComplexDosing], tags=["SIG"])
def parse_sig(
    request: SigRequest,
    interpreter: FallbackSigInterpreter = Depends(get_interpreter),
    api_key: str = Depends(verify_api_key)
):
    """Parse dosing instructions into a structured dosing schedule."""
    return interpreter.interpret(request.sig)

@router.post("/calculate/", response_model=CalculationResponse, tags=["Calculations"])
def calculate_quantity(
    request: CalculationRequest,
    interpreter: FallbackSigInterpreter = Depends(get_interpreter),
    api_key: str = Depends(verify_api_key)
):
    """Calculate the quantity to dispense and the packages to fill it with."""
    try:
        return run_calculation(request, interpreter)

    except InvalidCalculationInputError as e:
        logger.warning(f"Rejected calculation input: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Calculation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

@router.get("/test-calculation/", response_model=CalculationResponse, tags=["Testing"])
def test_calculation(
    interpreter: FallbackSigInterpreter = Depends(get_interpreter),
    api_key: str = Depends(verify_api_key)
):
    """Test with a sample prescription and package list."""
    request = CalculationRequest(**SAMPLE_REQUEST)
    return run_calculation(request, interpreter)

@router.get("/health", tags=["Info"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
