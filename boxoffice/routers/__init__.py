"""JSON routers exposing the user and inventory stores over HTTP."""
