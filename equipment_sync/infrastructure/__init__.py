# Infrastructure Layer - Database, in-memory store and messaging adapters
