"""Analytics services for household ledger reports."""

from src.services.analytics.ledger_reports import (
    AccountReportRow,
    CategoryReportRow,
    DailyReportRow,
    DividendIncomeRow,
    MonthlyNetWorthRow,
    NetWorthSummary,
    PeriodReport,
    StockPerformanceRow,
    compute_expense_sum,
    compute_monthly_net_worth,
    compute_realized_gain_in_period,
    generate_account_report,
    generate_category_report,
    generate_daily_report,
    generate_dividend_income_report,
    generate_monthly_report,
    generate_period_report,
    generate_stock_performance_report,
    generate_yearly_report,
    is_fixed_expense,
    is_savings_expense,
    summarize_net_worth,
)

__all__ = [
    "AccountReportRow",
    "CategoryReportRow",
    "DailyReportRow",
    "DividendIncomeRow",
    "MonthlyNetWorthRow",
    "NetWorthSummary",
    "PeriodReport",
    "StockPerformanceRow",
    "compute_expense_sum",
    "compute_monthly_net_worth",
    "compute_realized_gain_in_period",
    "generate_account_report",
    "generate_category_report",
    "generate_daily_report",
    "generate_dividend_income_report",
    "generate_monthly_report",
    "generate_period_report",
    "generate_stock_performance_report",
    "generate_yearly_report",
    "is_fixed_expense",
    "is_savings_expense",
    "summarize_net_worth",
]
