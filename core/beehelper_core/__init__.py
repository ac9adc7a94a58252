from beehelper_core.assist import AssistOutcome, ExerciseAssistant, NullRenderer, Renderer
from beehelper_core.classifier import (
    ExerciseMode,
    classify,
    extract_word_pairs,
    find_answer_input,
    find_answer_options,
)
from beehelper_core.config import (
    EngineConfig,
    HelperSettings,
    SelectorConfig,
    TimingConfig,
    load_engine_config,
    save_engine_config,
)
from beehelper_core.engine import HelperEngine, PassResult
from beehelper_core.extractor import find_correct_answer, find_revealed_answer
from beehelper_core.persistence import AsyncSaver, JsonFilePersistence, MemoryPersistence, PersistedState
from beehelper_core.scorer import TextNodeInfo, describe_text_nodes, locate_question
from beehelper_core.store import StoreStats, WordStore
from beehelper_core.text import is_ui_text, normalize_word
from beehelper_core.tracker import FeedbackTracker, LearnEvent, LearnKind, QuestionRecord, TrackerState
from beehelper_core.tree import Bounds, PageTree

__all__ = [
    "AssistOutcome",
    "AsyncSaver",
    "Bounds",
    "EngineConfig",
    "ExerciseAssistant",
    "ExerciseMode",
    "FeedbackTracker",
    "HelperEngine",
    "HelperSettings",
    "JsonFilePersistence",
    "LearnEvent",
    "LearnKind",
    "MemoryPersistence",
    "NullRenderer",
    "PageTree",
    "PassResult",
    "PersistedState",
    "QuestionRecord",
    "Renderer",
    "SelectorConfig",
    "StoreStats",
    "TextNodeInfo",
    "TimingConfig",
    "TrackerState",
    "WordStore",
    "classify",
    "describe_text_nodes",
    "extract_word_pairs",
    "find_answer_input",
    "find_answer_options",
    "find_correct_answer",
    "find_revealed_answer",
    "is_ui_text",
    "load_engine_config",
    "locate_question",
    "normalize_word",
    "save_engine_config",
]
