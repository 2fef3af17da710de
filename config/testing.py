from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

EMPLOYEE_SERVICE_URL = "http://directory.test"
SERVICE_KEY = "test-service-key"
