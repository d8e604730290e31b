"""
Integraciones externas de los pipelines de sync:

- google_sheets: lectura/escritura de la hoja (service account)
- postgrest: datastore via API REST (Supabase / PostgREST)
- postgres: datastore via conexion directa (psycopg)

Los pipelines estan diseñados para ejecutarse tanto como job (cron /
task scheduler) como desde el API; cada corrida es idempotente.
"""
