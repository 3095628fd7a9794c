"""Business services. Every function receives the session it works on."""
