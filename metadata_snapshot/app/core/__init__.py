SERVICE_NAME = "metadata-snapshot"
