from importlib import import_module

modules = [
    'health',
    'biochar',
    'graphene',
    'bet',
    'conductivity',
    'raman',
    'sem_reports',
    'update_reports',
    'objectives',
]

for m in modules:
    import_module(f'.{m}', __name__)

__all__ = modules
