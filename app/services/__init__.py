"""Service layer: business rules on top of the async session."""
