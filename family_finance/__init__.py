"""
Family Finance - Source Package

A household finance tracker: income, expenses and savings assigned to
family members and cards, with installment purchases, fixed monthly
bills and month-by-month summaries.

DESIGN PRINCIPLES:
1. Validate the form -> Expand the movement -> Store it as one batch
2. Fail early, fail visibly
3. Amounts are exact to the cent
4. Every change is auditable
5. Local data first; the family spreadsheet is a mirror
"""

__version__ = "1.0.0"
__author__ = "Family Finance Team"
