import os

class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URI', 'sqlite:///maintenance.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TASKS_PER_PAGE = int(os.getenv('TASKS_PER_PAGE', '20'))
    MAX_TASKS_PER_PAGE = int(os.getenv('MAX_TASKS_PER_PAGE', '100'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
