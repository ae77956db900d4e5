"""
Supabase integration: table access and realtime subscriptions.
"""

from cosmo_pos.supabase.client import RemoteStore
from cosmo_pos.supabase.realtime import ChangeEvent, RealtimeManager, normalize_change

__all__ = ["ChangeEvent", "RealtimeManager", "RemoteStore", "normalize_change"]
