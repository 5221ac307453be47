from django.apps import AppConfig


class TransferConfig(AppConfig):
    name = 'transfer'
    verbose_name = 'Kaltura to Vimeo transfer'
    default_auto_field = 'django.db.models.BigAutoField'
