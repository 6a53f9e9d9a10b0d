from loguru import logger

# silent unless the application opts in, i.e. logger.enable('palmgs')
logger.disable('palmgs')
