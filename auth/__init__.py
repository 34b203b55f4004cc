"""auth/ -- Stateless bearer-token authentication core for TokenGate.

Leaves first: passwords (PasswordHasher), store (CredentialStore), tokens
(TokenCodec), authenticator (Authenticator), gate and policy (pipeline
stages), pipeline (RequestPipeline).

Layer rule: auth/ imports only stdlib + third-party libraries, plus core/ in
bootstrap.py. It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
