"""
Employees Service Tests
"""

import pytest

from bizledger.api.errors import ConflictError, NotFoundError, ValidationError


class TestEmployees:
    """Tests for employee records."""

    def test_email_normalized(self, sample_employee):
        assert sample_employee["email"] == "juan@example.com"
        assert sample_employee["is_active"] is True

    def test_duplicate_email(self, employees, sample_employee):
        with pytest.raises(ConflictError, match="already exists"):
            employees.create({"first_name": "J", "last_name": "D", "email": "JUAN@example.com"})

    def test_names_required(self, employees):
        with pytest.raises(ValidationError):
            employees.create({"first_name": "Maria", "last_name": " "})

    def test_update_email_to_own_address(self, employees, sample_employee):
        updated = employees.update(sample_employee["id"], {"email": "juan@example.com", "designation": "CFO"})

        assert updated["designation"] == "CFO"

    def test_update_with_null_salary_keeps_stored_value(self, employees, sample_employee):
        updated = employees.update(sample_employee["id"], {"base_salary": None, "designation": "CFO"})

        assert updated["base_salary"] == 50000
        assert updated["designation"] == "CFO"

    def test_hard_delete_without_salary_history(self, employees, sample_employee):
        result = employees.delete(sample_employee["id"])

        assert result == {"success": True, "message": "Employee deleted successfully"}
        with pytest.raises(NotFoundError):
            employees.get_by_id(sample_employee["id"])

    def test_soft_delete_with_salary_history(self, employees, salary, sample_employee):
        salary.create({"employee_id": sample_employee["id"], "month": "2025-01", "base_salary": 50000})

        result = employees.delete(sample_employee["id"])

        assert result == {"success": True, "message": "Employee deactivated successfully"}
        assert employees.get_by_id(sample_employee["id"])["is_active"] is False
        assert employees.list_active() == []
