"""structured.prompts

Builds the conversations that ask a model for OHLCV predictions and for
OHLCV analyses. The parsers in `structured.ohlcv` and `structured.analysis`
do not depend on this wording.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from chatwire.core.exceptions import ConfigError
from chatwire.core.types import AnalysisType, ChatMessage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chatwire.core.types import OHLCVRecord

DEFAULT_INSTRUCTIONS = 'Based on these OHLCV data, predict the next period'
MAX_PREDICTION_COUNT = 50

_EXAMPLE_ROWS = (
    '{"open": 115.5, "high": 118.0, "low": 114.0, "close": 117.0, "volume": 1350000}',
    '{"open": 117.5, "high": 120.0, "low": 116.0, "close": 119.0, "volume": 1400000}',
)


def validate_count(count: int) -> int:
    if count < 1:
        raise ConfigError('Count must be positive integer')
    if count > MAX_PREDICTION_COUNT:
        raise ConfigError(f'Count parameter too large: {count}. Maximum allowed is {MAX_PREDICTION_COUNT}')
    return count


def estimated_max_tokens(count: int) -> int:
    """Lower bound on completion tokens for *count* candles."""
    return count * 50 + 100


def _example(count: int) -> str:
    if count == 1:
        return f'Example of valid response for 1 period:\n[{_EXAMPLE_ROWS[0]}]'
    lines = [f'Example of valid response for {count} periods:', '[', f'  {_EXAMPLE_ROWS[0]},', f'  {_EXAMPLE_ROWS[1]}']
    if count > 2:  # noqa: PLR2004
        lines.append(f'  {count - 2} more OHLCV objects following the same pattern')
    lines.append(']')
    return '\n'.join(lines)


def build_prediction_messages(
    records: Sequence[OHLCVRecord],
    instructions: str | None = None,
    count: int = 1,
) -> list[ChatMessage]:
    """Return ``[system, user]`` messages requesting *count* predicted candles."""
    validate_count(count)
    task = instructions or DEFAULT_INSTRUCTIONS
    if count == 1:
        count_rule = 'Return EXACTLY 1 OHLCV object for the next period.'
    else:
        count_rule = f'Return EXACTLY {count} consecutive OHLCV objects for the next {count} periods.'

    system_prompt = '\n'.join(
        (
            'You are a professional financial data analysis AI. '
            'The user will give you an array of OHLCV (Open, High, Low, Close, Volume) data.',
            f'Your task: {task}',
            'CRITICAL RULES:',
            f'1. {count_rule}',
            '2. Return ONLY a JSON array of OHLCV objects, NO explanations, comments, or other text',
            '3. The OHLCV array format must match: [{open, high, low, close, volume}, ...]',
            '4. All numbers must be valid numbers',
            '5. Ensure technical rationality (high >= low, high >= close >= low, volume >= 0)',
            '6. Maintain consistency with historical trends and patterns',
            '7. For technical analysis, provide reasonable values based on typical patterns',
            '8. Do not include markdown formatting, only pure JSON',
            _example(count),
        )
    )
    data = _dump(records)
    user_message = (
        f'Here is the historical OHLCV data ({len(records)} periods):\n{data}\n'
        'Please process this data according to the system instructions. '
        f'Remember to return EXACTLY {count} OHLCV object(s) in a JSON array with no additional text.'
    )
    return [ChatMessage.system(system_prompt), ChatMessage.user(user_message)]


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

ANALYSIS_FOCUS: dict[AnalysisType, str] = {
    AnalysisType.trend: (
        'Provide a detailed trend analysis of this OHLCV data, including price direction, '
        'support/resistance levels, and trend strength.'
    ),
    AnalysisType.volume: (
        'Analyze the volume patterns in this OHLCV data, including volume trends, '
        'unusual volume spikes, and volume-price relationships.'
    ),
    AnalysisType.technical: (
        'Perform technical analysis on this OHLCV data, identifying potential technical indicators, '
        'patterns, and trading signals.'
    ),
    AnalysisType.comprehensive: (
        'Provide a comprehensive analysis of this OHLCV data, covering trends, volume, '
        'technical aspects, and potential market implications.'
    ),
}


def resolve_analysis_type(value: str | AnalysisType) -> AnalysisType:
    try:
        return AnalysisType(value)
    except ValueError as exc:
        allowed = ', '.join(t.value for t in AnalysisType)
        raise ConfigError(f'Unknown analysis type: {value!r}. Expected one of {allowed}') from exc


def describe_records(records: Sequence[OHLCVRecord]) -> str:
    """Summary statistics for the analysis prompt; empty for no records."""
    if not records:
        return ''
    first, last = records[0], records[-1]
    change = last.close - first.close
    change_line = f'Overall price change: {change:+.2f}'
    if first.close:
        change_line += f' ({change / first.close * 100:+.2f}%)'
    highest = max(r.high for r in records)
    lowest = min(r.low for r in records)
    average_volume = sum(r.volume for r in records) / len(records)
    return '\n'.join(
        (
            f'This dataset contains {len(records)} periods of OHLCV data.',
            f'Price range: {lowest:.2f} - {highest:.2f}',
            change_line,
            f'Average volume: {average_volume:.0f}',
        )
    )


def _dump(records: Sequence[OHLCVRecord]) -> str:
    return json.dumps([r.model_dump() for r in records], indent=2)


def build_analysis_messages(
    records: Sequence[OHLCVRecord],
    analysis_type: str | AnalysisType = AnalysisType.comprehensive,
    message: str | None = None,
) -> list[ChatMessage]:
    """Return ``[system, user]`` messages requesting a free-text analysis."""
    focus = ANALYSIS_FOCUS[resolve_analysis_type(analysis_type)]
    lines = [
        'You are a professional financial data analyst. '
        'Your task is to analyze OHLCV (Open, High, Low, Close, Volume) data and provide insights.',
        f'Analysis focus: {focus}',
    ]
    if stats := describe_records(records):
        lines.append(f'Data characteristics:\n{stats}\n')
    lines += [
        'Please provide:',
        '1. Clear and structured analysis',
        '2. Key observations from the data',
        '3. Potential implications or insights',
        '4. Recommendations or considerations (if applicable)',
        'Format your response as a well-organized text analysis.',
    ]

    user_message = f'Here is the OHLCV data ({len(records)} periods):\n{_dump(records)}\n'
    if message:
        user_message += (
            f'My specific question or request: {message}\n'
            'Please analyze this data considering my request above.'
        )
    else:
        user_message += 'Please analyze this data as requested.'
    return [ChatMessage.system('\n'.join(lines)), ChatMessage.user(user_message)]


def build_structured_analysis_messages(
    records: Sequence[OHLCVRecord],
    message: str | None = None,
) -> list[ChatMessage]:
    """Return ``[system, user]`` messages requesting a JSON analysis object."""
    system_prompt = '\n'.join(
        (
            'You are a professional financial data analyst. '
            'Analyze the OHLCV data and provide a structured response with:',
            '1. Summary (brief overview)',
            '2. Details (key observations, 3-5 points)',
            '3. Recommendations (actionable insights, 2-3 points)',
            'Format as JSON: {"summary": "...", "details": ["...", "..."], "recommendations": ["...", "..."]}',
        )
    )
    user_message = f'Analyze this OHLCV data ({len(records)} periods):\n{_dump(records)}'
    if message:
        user_message += f'\n\nAdditional request: {message}'
    return [ChatMessage.system(system_prompt), ChatMessage.user(user_message)]
