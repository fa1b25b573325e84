"""core.messages

Static flavor text for the unluck system. Pure data: the engine only picks an index.

Keys are (step_id, choice). A missing key falls back to GENERIC_UNLUCK_MESSAGE.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

GENERIC_UNLUCK_MESSAGE = "Something unexpected went wrong, but you'll recover."
GENERIC_PERFECT_STORM_MESSAGE = "💥 PERFECT STORM: Everything collapsed at once!"

UNLUCK_MESSAGES: Dict[Tuple[int, str], List[str]] = {
    (1, "A"): [
        "Payment provider shipped a quiet API change overnight. Renewals went nowhere until lunch.",
        "Card network timeouts across two regions. Customers tried to pay; banks declined to participate.",
        "Fraud scoring decided your growth curve looked suspicious. Payouts are 'under review'.",
        "Currency conversion stalled mid-checkout. Half of Europe is still waiting on a spinner.",
    ],
    (1, "B"): [
        "Warehouse quota got trimmed without notice. The only chart going up is 'queries denied'.",
        "A backfill wrote last quarter's numbers into this month. The board saw a time machine.",
        "Dashboard vendor is 'investigating elevated errors'. The investor update is mostly blank boxes.",
        "Browser update broke the charting library. Metrics review became a slideshow of stack traces.",
    ],
    (2, "A"): [
        "Search ranking update filed you under home bakeries. Organic traffic went out for croissants.",
        "Bot protection flagged real visitors as bots. Bounce rate set a personal best.",
        "Consent banner covered the signup button on mobile. Conversions hid behind 'Manage preferences'.",
        "An A/B flag shipped the variant without a CTA to everyone. Bold, minimal, empty.",
    ],
    (2, "B"): [
        "Mail providers moved the welcome sequence to Promotions. Nobody was there to read it.",
        "One character of DNS drift broke email authentication. Onboarding emails evaporated.",
        "Link shortener domain got blocklisted mid-send. Every 'Get started' looked like phishing.",
        "Scheduler crossed a daylight saving boundary. 'Welcome aboard' arrived yesterday.",
    ],
    (3, "A"): [
        "Chat integration had an outage. Team mentions vanished and adoption looked like a ghost town.",
        "A permissions bug made everyone in one big workspace a read-only viewer.",
        "Realtime presence provider hiccuped. The app showed zero users and a lot of ghosts.",
        "Calendar invites rendered as raw ICS text. Meetings existed only in theory.",
    ],
    (3, "B"): [
        "A botnet found the signup form. Daily actives doubled, all named 'asdf'.",
        "Browser tracking rules shortened cookie life. Retention curves lost a fifth overnight.",
        "Timezone math counted tomorrow twice. Churn briefly went negative and nobody believed it.",
        "The data deletion job got enthusiastic and removed the cohort table too.",
    ],
    (4, "A"): [
        "Primary region sneezed. Pods played musical chairs and the database lost.",
        "Cache warmed perfectly, with yesterday's keys. Every hot path hit the origin.",
        "Noisy neighbour on the shared cluster ate your CPU. Latency graphs turned into mountains.",
        "Autoscaling worked great. The cloud bill discovered exponential functions.",
    ],
    (4, "B"): [
        "Model provider swapped versions silently. The assistant now answers like a sleepy philosopher.",
        "Moderation flagged 'reset my password' as a policy violation. Tickets piled up fast.",
        "Embeddings index started a rebuild mid-surge. The bot remembered everything except answers.",
        "Vendor rate limit hit the minute you trended. The bot learned to type '...' very slowly.",
    ],
    (5, "A"): [
        "Right-to-left layout flipped the UI. Buttons migrated to the other side of the screen.",
        "Plural rules in one launch language needed a form you never built. Copy read like a riddle.",
        "Missing glyphs rendered as empty boxes. The localized homepage became abstract art.",
        "Machine translation turned 'Sign up' into 'Give up'. Users complied.",
    ],
    (5, "B"): [
        "Acquiring bank triggered enhanced due diligence. Settlements went on sabbatical.",
        "Strong customer authentication popped mid-checkout and buyers left for coffee.",
        "A local payment rail asked for one more document, then forty more.",
        "Bank holidays in three markets at once. Payouts took a long weekend.",
    ],
}

PERFECT_STORM_MESSAGES: List[str] = [
    "💥 PERFECT STORM: Viral spike, model limits and a stale cache at the same time. Users sprinted in; answers crawled out.",
    "💥 PERFECT STORM: Throttles, timeouts and an assistant having an identity crisis, all before breakfast.",
    "💥 PERFECT STORM: Systems melting, support drowning, investors live-posting the incident.",
    "💥 PERFECT STORM: Cache stampede met thread pool starvation. The only thing scaling is the incident channel.",
    "💥 PERFECT STORM: Observability worked perfectly. It recorded the whole outage in high resolution.",
    "💥 PERFECT STORM: Vendor status says 'investigating'. Customers are investigating too, publicly.",
    "💥 PERFECT STORM: The assistant answered '42' to every ticket. None of them were asking about the universe.",
    "💥 PERFECT STORM: Partial DNS outage on launch day. Your domain played hide and seek with the internet.",
]
