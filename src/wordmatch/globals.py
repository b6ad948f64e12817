from fastapi.templating import Jinja2Templates

from .config import settings
from .provider import ProviderFactory, WordPairProvider
from .vocabulary import VocabularyManager

templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)
vocab_manager = VocabularyManager(settings.VOCAB_DIR)
word_provider: WordPairProvider = ProviderFactory.create(settings, vocab_manager)


def get_provider() -> WordPairProvider:
    return word_provider


def get_vocabulary() -> VocabularyManager:
    return vocab_manager
