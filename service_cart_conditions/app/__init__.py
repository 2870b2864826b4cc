"""
Cart Conditions service package.

Evaluates cart-based rule conditions for a host rule engine:
- Identity: resolves the anonymous contact to a customer when authenticated
- Carts: lists and loads the user's carts for the current site
- Decision: aggregates a cart metric and compares it to a threshold

Structure:
- app.main: CartConditionService facade wired from settings.
- app.conditions: models, operators, aggregation and the evaluator.
- app.adapters: in-memory collaborator implementations.
"""
