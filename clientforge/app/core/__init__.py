SERVICE_NAME = "clientforge"
