"""
Pipeline de sincronización one-way: TVMaze -> base de datos local.

Se ejecuta como tarea en background del API (o como job vía scripts/run_sync.py).

Objetivos de diseño:
- Incremental y reanudable: el cursor es el mayor ID de show persistido.
- Un show a la vez: show + reparto se persisten en una sola transacción.
- Sin duplicados: personas y pares (show, persona) se deduplican por ID.
- Rate limit: solo los 429 se reintentan (backoff exponencial sin tope).
"""
