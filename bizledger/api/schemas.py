"""
Request Models

Request bodies accept camelCase and snake_case spellings; every alias is
mapped onto one canonical snake_case field before services see the data.
Required fields and ranges are checked by the services, so every field here
is optional.
"""

from datetime import date, datetime, time
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def alias(*names: str) -> Any:
    return Field(None, validation_alias=AliasChoices(*names))


class RequestModel(BaseModel):
    """Base for write payloads."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    def to_patch(self) -> dict[str, Any]:
        """Fields the client actually sent, under canonical names."""
        return self.model_dump(exclude_unset=True)


class BillIn(RequestModel):
    vendor: str | None = None
    amount: float | None = None
    bill_date: date | None = alias("bill_date", "billDate", "date")
    description: str | None = None
    status: str | None = None
    card_id: str | None = alias("card_id", "cardId")
    category_id: str | None = alias("category_id", "categoryId")
    attachment_url: str | None = alias("attachment_url", "attachmentUrl")
    attachment_type: str | None = alias("attachment_type", "attachmentType")


class CardIn(RequestModel):
    card_number: str | None = alias("card_number", "cardNumber")
    card_holder: str | None = alias("card_holder", "cardHolder", "card_holder_name", "cardHolderName")
    card_type: str | None = alias("card_type", "cardType")
    bank: str | None = None
    expiry_date: date | None = alias("expiry_date", "expiryDate")
    card_limit: float | None = alias("card_limit", "cardLimit", "credit_limit", "creditLimit")
    balance: float | None = None
    is_active: bool | None = alias("is_active", "isActive")


class CardBalanceIn(RequestModel):
    balance: float


class CashTransactionIn(RequestModel):
    transaction_date: date | None = alias("transaction_date", "transactionDate", "date")
    description: str | None = None
    amount: float | None = None
    transaction_type: str | None = alias("transaction_type", "transactionType", "type")
    category: str | None = None
    payment_method: str | None = alias("payment_method", "paymentMethod")
    notes: str | None = None


class SalaryIn(RequestModel):
    employee_id: str | None = alias("employee_id", "employeeId")
    month: str | None = None
    base_salary: float | None = alias("base_salary", "baseSalary")
    allowances: float | None = None
    deductions: float | None = None
    net_salary: float | None = alias("net_salary", "netSalary")
    status: str | None = None
    paid_date: datetime | None = alias("paid_date", "paidDate")


class PettyExpenseIn(RequestModel):
    description: str | None = None
    amount: float | None = None
    category: str | None = None
    expense_date: date | None = alias("expense_date", "expenseDate", "date")
    vendor: str | None = None
    receipt_number: str | None = alias("receipt_number", "receiptNumber")
    notes: str | None = None


class BudgetIn(RequestModel):
    category_id: str | None = alias("category_id", "categoryId")
    category_name: str | None = alias("category_name", "categoryName", "category")
    budget_limit: float | None = alias("budget_limit", "budgetLimit", "amount")
    spent: float | None = None
    period: str | None = None
    month: str | None = alias("month", "start_date", "startDate")
    is_active: bool | None = alias("is_active", "isActive")


class ReminderIn(RequestModel):
    title: str | None = None
    description: str | None = None
    reminder_date: date | None = alias("reminder_date", "reminderDate", "date")
    reminder_time: time | None = alias("reminder_time", "reminderTime", "time")
    type: str | None = None
    related_id: str | None = alias("related_id", "relatedId")
    notification_methods: list[str] | None = alias("notification_methods", "notificationMethods")
    recipients: list[str] | None = None
    is_active: bool | None = alias("is_active", "isActive")


class EmployeeIn(RequestModel):
    first_name: str | None = alias("first_name", "firstName")
    last_name: str | None = alias("last_name", "lastName")
    email: str | None = None
    designation: str | None = None
    department_id: str | None = alias("department_id", "departmentId")
    base_salary: float | None = alias("base_salary", "baseSalary")
    join_date: date | None = alias("join_date", "joinDate")
    is_active: bool | None = alias("is_active", "isActive")


class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(RequestModel):
    email: str | None = None
    password: str | None = None
    first_name: str | None = alias("first_name", "firstName")
    last_name: str | None = alias("last_name", "lastName")
    role: str | None = None


class RefreshIn(RequestModel):
    refresh_token: str | None = alias("refresh_token", "refreshToken")
