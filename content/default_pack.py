"""content.default_pack

Built-in five-step pack: an AI cofounder SaaS from first revenue to global launch.

JSON-shaped on purpose (same keys as a pack file) so it goes through the same
validation as packs loaded from disk.
"""

from __future__ import annotations

from typing import Any, Dict

DEFAULT_PACK_DATA: Dict[str, Any] = {
    "id": "ai-cofounder-default",
    "version": "1.0.0",
    "title": "Choose Your Own Startup: AI Cofounder",
    "description": "Five decisions between a weekend prototype and a company that scales (or doesn't).",
    "author": "Scaling Meter team",
    "steps": [
        {
            "id": 1,
            "title": "First Dollars",
            "subtitle": "Week 2",
            "scenario": (
                "The prototype works and a handful of founders use it daily. You have time for exactly one "
                "thing this sprint: turn on paid plans, or build the metrics dashboard investors keep asking about."
            ),
            "optionA": {
                "label": "Launch paid plans with Stripe",
                "body": "Wire up subscriptions, a pricing page and a trial. Revenue starts now; the infra is held together with webhooks.",
                "delta": {"R": 10, "U": 2, "S": -2, "C": 3, "I": 2},
            },
            "optionB": {
                "label": "Build the investor metrics dashboard",
                "body": "Instrument everything and ship a live dashboard. No revenue yet, but the story gets much easier to tell.",
                "delta": {"R": 0, "U": 1, "S": 3, "C": 0, "I": 9},
            },
        },
        {
            "id": 2,
            "title": "Getting Found",
            "subtitle": "Month 1",
            "scenario": (
                "Signups come from word of mouth and one lucky tweet. Growth needs a channel: "
                "either bet on SEO content or on a lifecycle email engine that activates the people you already have."
            ),
            "optionA": {
                "label": "Go all in on SEO landing pages",
                "body": "Programmatic pages for every use case. Slow to compound, huge when it works.",
                "delta": {"R": 2, "U": 10, "S": -1, "C": 1, "I": 3},
            },
            "optionB": {
                "label": "Ship a lifecycle email engine",
                "body": "Onboarding drips, nudges and win-back campaigns. Fewer new users, better activated ones.",
                "delta": {"R": 4, "U": 5, "S": 0, "C": 6, "I": 1},
            },
        },
        {
            "id": 3,
            "title": "Sticky or Leaky",
            "subtitle": "Month 3",
            "scenario": (
                "Usage is real but churn is creeping up. Teams ask for collaboration features; "
                "your data says retention is a measurement problem first."
            ),
            "optionA": {
                "label": "Build team collaboration",
                "body": "Shared workspaces, mentions and permissions. Expansion revenue, plus a lot of new surface area to keep up.",
                "delta": {"R": 5, "U": 6, "S": -4, "C": 8, "I": 2},
            },
            "optionB": {
                "label": "Fix retention analytics first",
                "body": "Cohorts, event hygiene and a churn model. Nobody notices, except the people deciding what to build next.",
                "delta": {"R": 1, "U": 2, "S": 5, "C": 4, "I": 4},
            },
        },
        {
            "id": 4,
            "title": "The Spike",
            "subtitle": "Month 6",
            "scenario": (
                "A famous founder posts about you. Traffic is 10x and climbing. You can harden the infrastructure "
                "tonight, or ride the wave with the AI support agent you demoed last week."
            ),
            "optionA": {
                "label": "Harden infrastructure and autoscale",
                "body": "Caching, queues, rate limits and a runbook. You lose some of the wave, but nothing falls over.",
                "delta": {"R": 2, "U": 3, "S": 10, "C": 4, "I": 2},
            },
            "optionB": {
                "label": "Launch the AI support agent now",
                "body": "Let the model handle onboarding and support for the surge. Massive upside if it holds.",
                "delta": {"R": 10, "U": 12, "S": -6, "C": 5, "I": 8},
            },
        },
        {
            "id": 5,
            "title": "Going Global",
            "subtitle": "Month 9",
            "scenario": (
                "Half of the waitlist is outside your home market. Localize the product properly, "
                "or add local payment methods so those users can pay at all."
            ),
            "optionA": {
                "label": "Full localization in six languages",
                "body": "Translated UI, right-to-left support and local onboarding. Users everywhere feel at home.",
                "delta": {"R": 3, "U": 9, "S": -3, "C": 6, "I": 3},
            },
            "optionB": {
                "label": "Local payment methods first",
                "body": "Wallets, bank transfers and regional cards. Conversion jumps where money was the blocker.",
                "delta": {"R": 11, "U": 2, "S": -2, "C": 3, "I": 5},
            },
        },
    ],
    "metadata": {"theme": "ai-saas"},
}
