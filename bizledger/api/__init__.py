"""
FastAPI Backend for the accounting service

Provides REST API endpoints for bills, cards, cash, payroll, budgets,
reminders, employees and the dashboard. The ASGI app lives in
bizledger.api.main.
"""
