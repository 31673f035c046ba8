"""registry.catalog

Built-in model catalog. Pure data; `ModelRegistry` loads it on first use.
"""

from __future__ import annotations

from chatwire.registry.descriptor import ModelDescriptor, WireFormat

DEEPSEEK_CHAT_ENDPOINT = 'https://api.deepseek.com/v1/chat/completions'
DASHSCOPE_COMPATIBLE_ENDPOINT = 'https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions'
DASHSCOPE_NATIVE_ENDPOINT = 'https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation'


def _deepseek(
    model: str,
    display_name: str,
    description: str,
    *,
    max_tokens: int,
    context_length: int,
    capabilities: tuple[str, ...],
    is_free_tier: bool = False,
) -> ModelDescriptor:
    return ModelDescriptor(
        id=model,
        provider='deepseek',
        display_name=display_name,
        description=description,
        endpoint=DEEPSEEK_CHAT_ENDPOINT,
        max_tokens=max_tokens,
        context_length=context_length,
        default_max_tokens=2000,
        capabilities=capabilities,
        is_free_tier=is_free_tier,
        supports_streaming=True,
        supports_function_calling=True,
    )


def _qwen(
    model: str,
    display_name: str,
    description: str,
    *,
    max_tokens: int,
    context_length: int,
    capabilities: tuple[str, ...] = ('text-generation', 'chat'),
) -> ModelDescriptor:
    return ModelDescriptor(
        id=model,
        provider='dashscope',
        display_name=display_name,
        description=description,
        endpoint=DASHSCOPE_COMPATIBLE_ENDPOINT,
        max_tokens=max_tokens,
        context_length=context_length,
        default_max_tokens=1000,
        capabilities=capabilities,
    )


BUILTIN_MODELS: tuple[ModelDescriptor, ...] = (
    # DeepSeek
    _deepseek(
        'deepseek-chat',
        'DeepSeek Chat',
        'General-purpose dialogue model for everyday conversation and question answering.',
        max_tokens=4096,
        context_length=16384,
        capabilities=('chat', 'text-generation', 'qa', 'translation', 'summarization'),
        is_free_tier=True,
    ),
    _deepseek(
        'deepseek-coder',
        'DeepSeek Coder',
        'Code generation model supporting multiple programming languages.',
        max_tokens=8192,
        context_length=32768,
        capabilities=('code-generation', 'code-completion', 'debugging', 'code-explanation', 'refactoring'),
    ),
    _deepseek(
        'deepseek-reasoner',
        'DeepSeek Reasoner',
        'Deep reasoning model for complex logic analysis and problem solving.',
        max_tokens=8192,
        context_length=32768,
        capabilities=('complex-reasoning', 'problem-solving', 'logical-analysis', 'decision-making'),
    ),
    _deepseek(
        'deepseek-math',
        'DeepSeek Math',
        'Mathematical model for calculations and proofs.',
        max_tokens=4096,
        context_length=16384,
        capabilities=('mathematical-reasoning', 'calculation', 'proof-generation', 'scientific-computing'),
    ),
    _deepseek(
        'deepseek-financial',
        'DeepSeek Financial',
        'Financial analysis model for market analysis and forecasting.',
        max_tokens=8192,
        context_length=32768,
        capabilities=(
            'financial-analysis',
            'market-prediction',
            'risk-assessment',
            'portfolio-optimization',
            'financial-reporting',
        ),
    ),
    _deepseek(
        'deepseek-medical',
        'DeepSeek Medical',
        'Medical model for diagnostic assistance and health consultation.',
        max_tokens=8192,
        context_length=32768,
        capabilities=('medical-consultation', 'diagnostic-support', 'health-analysis', 'medical-research'),
    ),
    _deepseek(
        'deepseek-creative',
        'DeepSeek Creative',
        'Creative writing model for stories, poetry and marketing copy.',
        max_tokens=16384,
        context_length=65536,
        capabilities=('creative-writing', 'story-generation', 'poetry', 'content-creation', 'marketing-copy'),
    ),
    _deepseek(
        'deepseek-enterprise',
        'DeepSeek Enterprise',
        'Highest-capacity model for mission-critical applications.',
        max_tokens=32768,
        context_length=131072,
        capabilities=(
            'enterprise-ai',
            'business-intelligence',
            'data-analysis',
            'document-processing',
            'decision-support',
        ),
    ),
    _deepseek(
        'deepseek-omni',
        'DeepSeek Omni',
        'All-round model balancing performance and cost.',
        max_tokens=16384,
        context_length=65536,
        capabilities=('multipurpose', 'general-ai', 'versatile', 'balanced-performance'),
    ),
    # Alibaba DashScope (OpenAI-compatible mode)
    _qwen(
        'qwen-turbo',
        'Qwen-Turbo',
        'Lightweight model with fast responses for general conversation.',
        max_tokens=2000,
        context_length=8000,
    ),
    _qwen(
        'qwen-plus',
        'Qwen-Plus',
        'Balanced model for more demanding conversation and writing.',
        max_tokens=6000,
        context_length=32000,
    ),
    _qwen(
        'qwen-max',
        'Qwen-Max',
        'Flagship model for complex, multi-step tasks.',
        max_tokens=8000,
        context_length=32000,
    ),
    _qwen(
        'qwen-max-longcontext',
        'Qwen-Max-LongContext',
        'Flagship model with an extended context window.',
        max_tokens=8000,
        context_length=128000,
        capabilities=('text-generation', 'chat', 'long-context'),
    ),
    _qwen(
        'qwen2.5-7b-instruct',
        'Qwen2.5-7B-Instruct',
        'Open-weight 7B instruction-tuned model.',
        max_tokens=6000,
        context_length=32000,
    ),
    _qwen(
        'qwen2.5-coder-32b',
        'Qwen2.5-Coder-32B',
        'Open-weight 32B code model.',
        max_tokens=8000,
        context_length=32000,
        capabilities=('text-generation', 'code-generation', 'programming'),
    ),
    _qwen(
        'qwen-financial',
        'Qwen-Financial',
        'Financial analysis model.',
        max_tokens=6000,
        context_length=32000,
        capabilities=('text-generation', 'financial-analysis'),
    ),
    # Alibaba DashScope native text-generation API
    ModelDescriptor(
        id='qwen-turbo',
        provider='dashscope-native',
        display_name='Qwen-Turbo (native API)',
        description='Qwen-Turbo served through the DashScope text-generation endpoint.',
        endpoint=DASHSCOPE_NATIVE_ENDPOINT,
        wire_format=WireFormat.native,
        max_tokens=2000,
        context_length=8000,
        default_max_tokens=1000,
        capabilities=('text-generation', 'chat'),
        supports_streaming=False,
    ),
)
