from auction_site.tasks.session_cleanup import SessionSweeper, start_session_sweeper

__all__ = ["SessionSweeper", "start_session_sweeper"]
