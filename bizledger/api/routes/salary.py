"""
Salary API Routes

Salary records are admin-managed; net salary is always computed server-side.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataMessageResponse, DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import SalaryIn

router = APIRouter(prefix="/salary", tags=["salary"])

RESOURCE = "salary"


class SalaryOut(BaseModel):
    id: str
    employee_id: str | None = None
    month: str | None = None
    base_salary: float | None = None
    allowances: float | None = None
    deductions: float | None = None
    net_salary: float | None = None
    status: str | None = None
    paid_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SalaryStats(BaseModel):
    total_records: int
    pending_count: int
    paid_count: int
    total_net_salary: float
    average_net_salary: float


@router.get("", response_model=ReadResponse[list[SalaryOut]])
def list_salaries(
    employee_id: str | None = Query(None, alias="employeeId"),
    month: str | None = Query(None),
    salary_status: str | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.salary.list({"employee_id": employee_id, "month": month, "status": salary_status})
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/stats/summary", response_model=DataResponse[SalaryStats])
def salary_stats(
    month: str | None = Query(None),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.salary.get_stats({"month": month}))


@router.get("/employee/{employee_id}", response_model=ReadResponse[list[SalaryOut]])
def employee_salary_history(
    employee_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.salary.get_employee_history(employee_id)
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/{salary_id}", response_model=ReadResponse[SalaryOut])
def get_salary(
    salary_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.salary.get_by_id(salary_id), services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[SalaryOut])
def create_salary(
    body: SalaryIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Create a pending salary record.

    Any net_salary in the body is ignored in favour of
    base_salary + allowances - deductions.
    """
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.salary.create(data, user.id))


@router.put("/{salary_id}/mark-paid", response_model=DataMessageResponse[SalaryOut])
def mark_salary_paid(
    salary_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.salary.mark_paid(salary_id), message="Salary marked as paid")


@router.put("/{salary_id}", response_model=DataResponse[SalaryOut])
def update_salary(
    salary_id: str,
    body: SalaryIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.salary.update(salary_id, patch, user.id))


@router.delete("/{salary_id}", response_model=MessageResponse)
def delete_salary(
    salary_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.salary.delete(salary_id)
