"""Course endpoints: inventory, evaluators, enrollment, evaluation, certificates."""

from fastapi import APIRouter, Depends, Request, status

from certification.core.models import Course, EvaluationRecord
from certification.core.platform import CertificationPlatform
from certification.web.deps import get_caller, get_platform, persist
from certification.web.schemas import (
    CertificatesCreate,
    CourseCreate,
    CourseResponse,
    EvaluationCreate,
    EvaluationListResponse,
    EvaluationResponse,
    EvaluatorAssign,
    FinalizationResponse,
    PlacePurchase,
    PlaceTransfer,
)

router = APIRouter(prefix="/api/courses", tags=["courses"])


def _course_to_response(course: Course) -> CourseResponse:
    return CourseResponse(
        course_id=course.course_id,
        fee_per_place=course.fee_per_place,
        total_places=course.total_places,
        places_purchased=course.places_purchased,
        passed_count=course.passed_count,
        creator=course.creator,
        metadata_uri=course.metadata_uri,
        evaluators=course.evaluators.values(),
        students=course.students.values(),
    )


def _evaluation_to_response(record: EvaluationRecord) -> EvaluationResponse:
    return EvaluationResponse(
        mark=record.mark,
        timestamp=record.timestamp,
        student=record.student,
        evaluator=record.evaluator,
        passed=record.passed,
    )


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseCreate,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> CourseResponse:
    """Create a course or add places to an existing one."""
    course = platform.create_course(caller, body.course_id, body.initial_supply, body.uri, body.fee)
    persist(request)
    return _course_to_response(course)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: int,
    platform: CertificationPlatform = Depends(get_platform),
) -> CourseResponse:
    """Get a course by id."""
    return _course_to_response(platform.get_course(course_id))


@router.post("/{course_id}/evaluators", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def assign_evaluator(
    course_id: int,
    body: EvaluatorAssign,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> CourseResponse:
    """Assign an evaluator to a course."""
    platform.set_up_evaluator(caller, body.evaluator, course_id)
    persist(request)
    return _course_to_response(platform.get_course(course_id))


@router.delete("/{course_id}/evaluators/{evaluator}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_evaluator(
    course_id: int,
    evaluator: str,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> None:
    """Remove an evaluator from a course."""
    platform.remove_evaluator(caller, evaluator, course_id)
    persist(request)


@router.post("/{course_id}/enrollments", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def buy_place(
    course_id: int,
    body: PlacePurchase,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> CourseResponse:
    """Buy a place in a course for the calling address."""
    platform.buy_place(caller, course_id, body.value)
    persist(request)
    return _course_to_response(platform.get_course(course_id))


@router.post("/{course_id}/transfers", status_code=status.HTTP_204_NO_CONTENT)
async def transfer_place(
    course_id: int,
    body: PlaceTransfer,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> None:
    """Hand the course unit to an enrolled student."""
    platform.transfer_place_nft(caller, body.student, course_id)
    persist(request)


@router.post("/{course_id}/evaluations", response_model=EvaluationResponse, status_code=status.HTTP_201_CREATED)
async def evaluate(
    course_id: int,
    body: EvaluationCreate,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> EvaluationResponse:
    """Record a student's mark."""
    record = platform.evaluate(caller, course_id, body.student, body.mark)
    persist(request)
    return _evaluation_to_response(record)


@router.get("/{course_id}/evaluations", response_model=EvaluationListResponse)
async def list_evaluations(
    course_id: int,
    platform: CertificationPlatform = Depends(get_platform),
) -> EvaluationListResponse:
    """List a course's evaluations with the pass/fail split."""
    records = platform.get_evaluations(course_id)
    passed, failed = platform.get_passed_and_failed(course_id)
    return EvaluationListResponse(
        evaluations=[_evaluation_to_response(r) for r in records],
        passed=passed,
        failed=failed,
        count=len(records),
    )


@router.post("/{course_id}/certificates", response_model=FinalizationResponse)
async def make_certificates(
    course_id: int,
    body: CertificatesCreate,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> FinalizationResponse:
    """Finalize a course after its exam."""
    report = platform.make_certificates(caller, course_id, body.certificate_uri)
    persist(request)
    return FinalizationResponse(**report.to_dict())
