"""
                        Services Module

Business rules of the point of sale, one service per aggregate.
Each service is bound to the request's AsyncSession and commits once
per operation.

Services:
    - menu_service: menu groups, products and menus
    - table_service: order tables and table groups
    - order_service: order placement and status lifecycle
    - ledger_manager: process-safe Excel sales ledger
"""