"""Sample document showing every annotation kind, nesting and headings."""

SAMPLE_FILE_NAME = "sample.md"

SAMPLE = """\
# CriticMarkup Demo

This is a sample document demonstrating {++all five types of++} CriticMarkup.

## Tracked Changes

Here is some text that has {--been carelessly--} written and needs editing.

The word {~~colour~>color~~} was changed to American English.

{++This entire paragraph was added during review. It contains **bold** and \
*italic* text to show that markdown renders inside additions.++}

## Comments and Highlights

This is {==an important claim==}{>>Do we have a source for this? Needs \
citation.<<} that reviewers flagged.

Another paragraph with a {>>Nice work on this section!<<} comment.

## Multiple Changes Per Line

Normal text {++with an addition++} and {--a deletion--} on the same line, \
plus a {~~typo~>correction~~}.

## Nested Changes

{--## Multiple Changes Per Line--}

{--
Normal text {++with an addition++} and {--a deletion--} on the same line, \
plus a {~~typo~>correction~~}.
--}

## Edge Cases

{++First++} word addition. Last word {--deletion--}.

A paragraph with {++multiple++} additions of the {++same word++} to test \
offset tracking.
"""
