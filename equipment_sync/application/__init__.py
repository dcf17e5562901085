# Application Layer - Services orchestrating domain rules over the entity store
