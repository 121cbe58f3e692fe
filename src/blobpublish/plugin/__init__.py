from .MessageQueue import Message, MessageMaker, MessageQueue
from .PublishPlugin import REPORT_FINISHED_MESSAGE, SETUP_MESSAGE, PluginContext, PublishPlugin
from .ResultStorageManager import ResultStorageManager

__all__ = ['Message', 'MessageMaker', 'MessageQueue', 'PluginContext', 'PublishPlugin',
           'ResultStorageManager', 'SETUP_MESSAGE', 'REPORT_FINISHED_MESSAGE']
