"""Manage dedicated game servers installed through SteamCMD."""
