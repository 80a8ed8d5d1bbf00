"""Project package: settings, URL configuration and WSGI/ASGI entrypoints."""
