LOGGER_NAME = "boostrace"
