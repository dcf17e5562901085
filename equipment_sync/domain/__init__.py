# Domain Layer - Entities, transition rules, reconciliation planning
