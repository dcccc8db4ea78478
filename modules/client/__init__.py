"""
Notepad Client Module.

Client-side half of the notepad: everything that happens before a note
reaches the server.

Architecture:
- encryption: AES-GCM encryption of note content with a password-derived key
- api: async HTTP client for the backend (httpx)
- storage: local JSON fallback cache used when the backend is unreachable
- autosave: debounced auto-save controller and the encrypted note session

All requests include X-Client-Source: client for log routing.
"""
