"""HTTP routers: agencies, volunteers, admin and password reset."""
