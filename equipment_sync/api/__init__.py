# API Layer - FastAPI routers, schemas and dependencies
