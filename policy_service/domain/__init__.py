"""
Domain layer: value objects, pure domain services and collaborator interfaces.
"""
