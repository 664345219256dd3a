"""
Supabase Compliance Checker

Проверка настроек безопасности проекта Supabase:
- Multi-Factor Authentication (MFA) для всех пользователей
- Row Level Security (RLS) на всех публичных таблицах
- Point in Time Recovery (PITR) для базы данных

Usage:
    python -m cli.main run --url https://<project>.supabase.co
"""

__version__ = "1.0.0"
