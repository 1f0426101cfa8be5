"""SnapTweet — FastAPI REST API layer.

Modules
-------
main
    Application factory, route handlers, and the ``main()`` CLI entry point.
models
    Pydantic response envelopes used only at the HTTP boundary.
"""
