"""
Employees API Routes
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import EmployeeIn

router = APIRouter(prefix="/employees", tags=["employees"])

RESOURCE = "employees"


class EmployeeOut(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    designation: str | None = None
    department_id: str | None = None
    base_salary: float | None = None
    join_date: date | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@router.get("", response_model=ReadResponse[list[EmployeeOut]])
def list_employees(
    is_active: bool | None = Query(None),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.employees.list({"is_active": is_active})
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/active", response_model=ReadResponse[list[EmployeeOut]])
def list_active_employees(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.employees.list_active(), services.policy, user.role, RESOURCE)


@router.get("/{employee_id}", response_model=ReadResponse[EmployeeOut])
def get_employee(
    employee_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.employees.get_by_id(employee_id), services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[EmployeeOut])
def create_employee(
    body: EmployeeIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.employees.create(data, user.id))


@router.put("/{employee_id}", response_model=DataResponse[EmployeeOut])
def update_employee(
    employee_id: str,
    body: EmployeeIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.employees.update(employee_id, patch, user.id))


@router.delete("/{employee_id}", response_model=MessageResponse)
def delete_employee(
    employee_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    """Deactivate an employee with salary history, otherwise delete.

    Returns:
        {success, message}
    """
    return services.employees.delete(employee_id)
