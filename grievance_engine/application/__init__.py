"""Application layer - use cases over the grievance domain.

Services here orchestrate domain models through ports. They never import
infrastructure or api modules.
"""
