from .user_directory import UserDirectory, post_user_summary, scan_user_summary

__all__ = ["UserDirectory", "post_user_summary", "scan_user_summary"]
