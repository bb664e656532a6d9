"""
Backend relay between the Blockbook front-end and the GitHub REST API.

The FastAPI service exchanges OAuth codes for tokens, makes sure the user's
vault repository exists, lists markdown notes stored in it and writes new
notes back through the contents API.
"""
