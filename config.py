import os

basedir = os.path.abspath(os.path.dirname(__file__))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-for-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Custom config
    ADMIN_USER = os.environ.get('ADMIN_USER', 'admin')
    ADMIN_PASS = os.environ.get('ADMIN_PASS', 'password')

    # CSV import
    IMPORT_BATCH_SIZE = int(os.environ.get('IMPORT_BATCH_SIZE', 100))
    IMPORT_COMMENT_PREFIX = os.environ.get('IMPORT_COMMENT_PREFIX', '#')
    TEMPLATES_DIR = os.environ.get('TEMPLATES_DIR') or \
        os.path.join(basedir, 'app', 'data', 'templates')
