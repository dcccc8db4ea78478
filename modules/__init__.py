"""
Application Modules.

- backend/: Notepad API, database, attachment storage, configuration
- client/: Client-side encryption, HTTP client, auto-save and fallback cache
"""
