# This file marks the routers package for versioned API endpoint modules.
