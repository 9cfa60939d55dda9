"""
Strategic Insight Meta - "why am I seeing this?"
================================================

Every insight leaving the engine carries a StrategicInsightMeta:

| Field                  | Meaning                                              |
|------------------------|------------------------------------------------------|
| why_recommended        | why this insight applies to *this* case              |
| triggered_by           | the signals that produced it                         |
| alternatives           | the branch that would appear under other evidence    |
| risk_if_ignored        | what is lost by not acting                           |
| best_stage_to_use      | when to deploy it                                    |
| how_this_helps_you_win | the concrete win-rationale                           |

Selection is a dispatch on (insight kind, type key): leverage type, weak-spot
type, compliance application, time-pressure issue, behaviour pattern,
vulnerability type, strategy route, scenario key, judicial category.
Practice-area variants (criminal / injury / housing) override single fields.
Unknown keys fall back to the kind's generic template, and unknown kinds to a
catch-all, so generation never fails.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .context import DetectorContext
from .dedup import dedupe_strings
from .schemas import (
    AlternativeBranch,
    ExpectationStatus,
    InsightKind,
    JudicialExpectation,
    OpponentVulnerability,
    StrategicAnalysis,
    StrategicInsightMeta,
)

logger = logging.getLogger(__name__)

STAGE_CASE_MANAGEMENT = "CCMC / case management"
STAGE_NEXT_HEARING = "At next hearing"
STAGE_PRE_ACTION = "Early PAP stage"
STAGE_TRIAL = "At trial / cross-examination"
STAGE_PTR = "Pre-trial review"
STAGE_PTR_TRIAL = "Pre-trial review / At trial"
STAGE_PAP_PTR = "Early PAP stage / Pre-trial review"
STAGE_SETTLEMENT = "Pre-trial review / Settlement window"
STAGE_NOW = "Now / Next available hearing"
STAGE_ASAP = "As soon as possible"


def _alt(label: str, description: str, *unlocked_by: str) -> AlternativeBranch:
    return AlternativeBranch(label=label, description=description, unlocked_by=list(unlocked_by))


@dataclass
class MetaTemplate:
    """Static text for one (kind, key); variants override fields per practice-area tag"""
    why: str
    risk: str
    stage: str
    win: str
    triggers: List[str] = field(default_factory=list)
    alternatives: List[AlternativeBranch] = field(default_factory=list)
    variants: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def resolve(self, tag: Optional[str]) -> Dict[str, str]:
        values = {"why": self.why, "risk": self.risk, "stage": self.stage, "win": self.win}
        if tag and tag in self.variants:
            values.update(self.variants[tag])
        return values


# =============================================================================
# Templates
# =============================================================================

_PROCEDURAL_CRIMINAL = {
    "stage": STAGE_NEXT_HEARING,
    "win": "Puts the non-compliance before the court at the next hearing and supports a request for costs.",
}

LEVERAGE_TEMPLATES: Dict[str, MetaTemplate] = {
    "late_response": MetaTemplate(
        why="The opponent has not responded within a reasonable time. Courts expect timely engagement and view unexplained delay unfavourably.",
        risk="The delay goes unchallenged, the chance to seek costs or enforcement passes, and inaction can look like acceptance.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Grounds an application for costs or an unless order; the procedural advantage often forces engagement or settlement.",
        triggers=["No response received within a reasonable time"],
        alternatives=[
            _alt("Settlement-focused route", "A prompt response moves the case to substantive negotiation.",
                 "Opponent response letter", "Settlement proposal"),
            _alt("Mediation route", "With both sides engaging, mediation replaces procedural pressure.",
                 "Opponent response", "Mediation agreement"),
        ],
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "missing_pre_action": MetaTemplate(
        why="The pre-action protocol has not been followed. The court treats protocol non-compliance seriously and may impose costs sanctions.",
        risk="The protocol failure never reaches the court and the costs or procedural advantage is lost.",
        stage=STAGE_PRE_ACTION,
        win="Supports costs sanctions and colours the court's view of the opponent's conduct, creating settlement pressure.",
        triggers=["Pre-action protocol letter not found"],
        alternatives=[
            _alt("Protocol-compliant route", "A compliant protocol response returns the case to the standard stages.",
                 "Pre-action protocol response", "Compliant disclosure"),
        ],
        variants={"housing": {
            "why": "The pre-action protocol has not been followed. In housing disrepair this often signals wider non-compliance with Awaab's Law and repair standards.",
            "win": "Shows systematic non-compliance with housing duties, strengthening liability and quantum and supporting aggravated damages.",
        }},
    ),
    "missing_evidence": MetaTemplate(
        why="Evidence the court will expect for this practice area is not on file. Gaps on liability or causation decide cases.",
        risk="The gap surfaces late, when it is expensive or impossible to close.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Closing the gap early removes the easiest line of attack on your case.",
        alternatives=[
            _alt("Complete evidence route", "With the evidence obtained, focus moves to the substantive strength of the case.",
                 "Evidence obtained", "Expert instructed"),
        ],
        variants={"injury": {"stage": STAGE_PTR}},
    ),
    "administrative_gap": MetaTemplate(
        why="Client-care paperwork is outstanding. It does not weaken the merits but should be tidied before issue.",
        risk="Minor compliance friction with the regulator or on assessment of costs.",
        stage=STAGE_ASAP,
        win="Keeps the file clean so nothing distracts from the substantive case.",
        alternatives=[
            _alt("Complete file route", "With the paperwork on file this item disappears.", "Client ID", "Signed retainer"),
        ],
    ),
    "missing_deadline": MetaTemplate(
        why="A procedural deadline has passed without compliance. The court enforces its directions and relief from sanctions is not automatic.",
        risk="The breach is waived by inaction and the opponent avoids the consequence of missing it.",
        stage=STAGE_NOW,
        win="Supports an unless order or strike-out; the defaulting party must seek relief under CPR 3.9.",
        alternatives=[
            _alt("Compliance route", "Late compliance with a consent extension returns the case to the timetable.",
                 "Late compliance", "Agreed extension"),
        ],
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "disclosure_failure": MetaTemplate(
        why="Disclosure has not been given as CPR 31.10 requires. Incomplete disclosure weakens the defaulting party and hands you tactical options.",
        risk="Disclosure failures go unchallenged and damaging documents may never surface.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Grounds a specific disclosure application with costs; the opponent must disclose or face sanctions.",
        triggers=["Disclosure list not provided", "CPR 31.10 requirements not met"],
        alternatives=[
            _alt("Full disclosure route", "Full disclosure shifts the work to reviewing what was disclosed.",
                 "Complete disclosure list", "All relevant documents provided"),
        ],
    ),
    "guideline_breach": MetaTemplate(
        why="The records show care falling below a recognised clinical guideline. Breach of duty is the core of a negligence claim.",
        risk="The strongest liability point is under-used in correspondence and offers.",
        stage=STAGE_PRE_ACTION,
        win="Anchors the Letter of Claim on breach and puts the defendant under early pressure to admit liability.",
        triggers=["Guideline breach in the records"],
        alternatives=[
            _alt("Causation-led route", "If breach is admitted, the dispute narrows to causation and quantum.",
                 "Admission of breach"),
        ],
    ),
    "expert_confirmation": MetaTemplate(
        why="Expert evidence already supports your case on breach or causation.",
        risk="Supportive expert evidence is held back and its settlement value is not used.",
        stage=STAGE_PAP_PTR,
        win="Independent expert support is the evidence that most often moves a defendant to admit or settle.",
        triggers=["Supportive expert evidence"],
        alternatives=[
            _alt("Competing experts route", "A contrary defence expert turns the case into a battle of experts.",
                 "Defence expert report"),
        ],
    ),
    "delay_causation": MetaTemplate(
        why="The records show delay in diagnosis or treatment, which links the breach to the harm suffered.",
        risk="Causation is argued in the abstract instead of through the documented delay.",
        stage=STAGE_PTR,
        win="A documented delay gives a clear causal chain the court can follow.",
        triggers=["Delay in diagnosis or treatment"],
    ),
    "serious_harm": MetaTemplate(
        why="The harm recorded is serious and drives quantum.",
        risk="Valuation is understated and early offers are pitched too low.",
        stage=STAGE_SETTLEMENT,
        win="Serious harm raises the value of the claim and the defendant's exposure, improving settlement terms.",
        triggers=["Serious harm recorded"],
    ),
    "awaabs_law_breach": MetaTemplate(
        why="A social landlord has missed a statutory Awaab's Law deadline for a damp, mould or cold hazard. The deadlines are fixed by statute, not by negotiation.",
        risk="The breach is never put to the landlord, the hazard persists and the aggravating conduct drops out of quantum.",
        stage=STAGE_PRE_ACTION,
        win="A statutory breach cannot be explained away; it strengthens quantum and supports urgent injunctive relief.",
        triggers=["Awaab's Law deadline passed without investigation or works"],
        alternatives=[
            _alt("Works in progress route", "Once investigation and works are under way, focus moves to quantum for the period of breach.",
                 "Inspection report", "Works order"),
        ],
    ),
}

WEAK_SPOT_TEMPLATES: Dict[str, MetaTemplate] = {
    "contradiction": MetaTemplate(
        why="The opponent's evidence contradicts itself. Inconsistency undermines credibility and gives material for cross-examination.",
        risk="Inconsistent evidence goes unchallenged and a credibility point is lost.",
        stage=STAGE_TRIAL,
        win="Cross-examination material that weakens the opponent's whole account, improving judgment or settlement prospects.",
        alternatives=[
            _alt("Consistent evidence route", "If the evidence is consistent, the challenge moves to substantive arguments.",
                 "Consistent witness statements", "Aligned documentary evidence"),
            _alt("Expert evidence route", "If experts clarify the conflict, the case turns on the expert evidence.",
                 "Expert clarification", "Updated expert reports"),
        ],
        variants={"injury": {
            "win": "Contradictions in medical or witness evidence undermine causation or quantum, reducing damages or affecting liability findings.",
        }},
    ),
    "missing_evidence": MetaTemplate(
        why="The case lacks evidence the burden of proof depends on.",
        risk="The gap is never raised and the court never weighs what cannot be proved.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Grounds a challenge to the unsupported parts of the case, up to summary judgment where the gap is fundamental.",
        variants={"injury": {
            "stage": STAGE_PTR,
            "win": "Without medical records, accident evidence or expert reports causation and quantum cannot be proved.",
        }},
    ),
    "timeline_gap": MetaTemplate(
        why="The chronology has an unexplained gap. Judges look for a coherent sequence of events.",
        risk="The gap is filled by the other side's narrative.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A complete chronology removes doubt about what happened when.",
        alternatives=[
            _alt("Complete chronology route", "Records covering the gap remove this weak spot.", "Records for the gap period"),
        ],
    ),
    "wrong_date": MetaTemplate(
        why="Dates in the evidence do not line up.",
        risk="Date errors are exploited at trial instead of corrected now.",
        stage=STAGE_PTR,
        win="Correcting or exploiting date errors early controls the factual narrative.",
    ),
    "missing_records": MetaTemplate(
        why="Records that should exist have not been produced.",
        risk="The absence of records is never tested.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Supports a specific disclosure request and adverse inferences if the records are not produced.",
        alternatives=[
            _alt("Full records route", "Production of the records moves the focus to their content.", "Records disclosed"),
        ],
    ),
    "no_response": MetaTemplate(
        why="The opponent has not engaged with correspondence.",
        risk="Silence is tolerated and the timetable drifts.",
        stage=STAGE_NOW,
        win="Non-engagement supports directions, costs and a firmer negotiating stance.",
        alternatives=[
            _alt("Engaged opponent route", "A substantive reply moves the case back to the merits.", "Opponent response"),
        ],
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "poor_expert": MetaTemplate(
        why="The opponent's expert evidence has weaknesses of method, scope or qualification.",
        risk="Weak expert evidence is accepted without challenge.",
        stage=STAGE_PTR_TRIAL,
        win="Grounds a challenge under CPR 35 and cross-examination on methodology, reducing the weight given to the report.",
        triggers=["Expert report analysis"],
        alternatives=[
            _alt("Strong expert evidence route", "A robust report shifts the challenge to your own expert evidence.",
                 "Updated expert report", "Qualified expert"),
        ],
    ),
}

COMPLIANCE_TEMPLATES: Dict[str, MetaTemplate] = {
    "unless_order": MetaTemplate(
        why="The breach is serious and prolonged enough for the court to make an unless order.",
        risk="The breach continues without consequence.",
        stage=STAGE_CASE_MANAGEMENT,
        win="An unless order converts continued default into strike-out.",
        alternatives=[_alt("Compliance route", "Compliance before the application removes the sanction.", "Late compliance")],
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "further_information": MetaTemplate(
        why="The rule breach leaves gaps that a request for further information can close.",
        risk="The gaps stay open and the case is pleaded against an unclear target.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Forces the opponent to commit to a position, narrowing the issues.",
        alternatives=[_alt("Voluntary route", "A voluntary answer avoids the application.", "Response to request")],
    ),
    "direction": MetaTemplate(
        why="A protocol step is missing and the court can direct it to be taken.",
        risk="Costs sanctions for the protocol failure may land on the wrong party.",
        stage=STAGE_PRE_ACTION,
        win="Regularises the procedure and protects your costs position.",
    ),
    "strike_out": MetaTemplate(
        why="The defect goes to the root of the pleaded case.",
        risk="A defective case proceeds to trial.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Strike-out ends or narrows the case without a trial.",
    ),
    "costs_order": MetaTemplate(
        why="The breach has caused wasted costs.",
        risk="Wasted costs are never recovered.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Shifts the cost of the default onto the defaulting party.",
    ),
}

TIME_PRESSURE_TEMPLATES: Dict[str, MetaTemplate] = {
    "opponent_delay": MetaTemplate(
        why="The opponent's delay has opened a window of tactical advantage. Acting now maximises the leverage.",
        risk="The window closes and the chance to seek costs or enforcement passes.",
        stage=STAGE_NOW,
        win="Grounds for costs, unless orders or enforcement, keeping pressure on the opponent.",
        triggers=["Opponent delays detected", "Response time analysis"],
        alternatives=[
            _alt("Responsive opponent route", "A timely reply moves the case to substantive negotiation.",
                 "Opponent response", "Timely communication"),
        ],
    ),
    "disclosure_overdue": MetaTemplate(
        why="Disclosure is overdue. Late disclosure is leverage while it lasts.",
        risk="The delay goes unchallenged and the disclosure timetable slips further.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Grounds a specific disclosure application with costs.",
        triggers=["Disclosure deadline analysis", "CPR 31.10 requirements"],
        alternatives=[_alt("Timely disclosure route", "Disclosure now moves the focus to document review.", "Complete disclosure")],
    ),
    "hearing_preparation": MetaTemplate(
        why="The hearing is close and preparation is not yet visible on the file.",
        risk="An unprepared hearing, an adjournment or an adverse costs order.",
        stage=STAGE_ASAP,
        win="Arriving prepared while the opponent is not is a decisive advantage at hearing.",
        alternatives=[_alt("Adjourned hearing route", "An adjournment relieves the timetable pressure.", "Adjournment order")],
    ),
    "hearing_silence": MetaTemplate(
        why="The opponent has gone silent with a hearing imminent.",
        risk="The hearing proceeds without the non-engagement before the court.",
        stage=STAGE_NOW,
        win="The court sees the non-engagement at the hearing, supporting directions and costs.",
    ),
    "deadline_approaching": MetaTemplate(
        why="A deadline is about to fall due.",
        risk="A missed deadline exposes your own side to sanctions.",
        stage=STAGE_ASAP,
        win="Compliance on time keeps the procedural high ground.",
        alternatives=[_alt("Extended timeline route", "An agreed extension relieves the pressure.", "Deadline extension", "Court order")],
    ),
    "settlement_window": MetaTemplate(
        why="Delay combined with an approaching hearing makes this the best moment for settlement pressure.",
        risk="The window passes and both sides incur trial costs.",
        stage=STAGE_SETTLEMENT,
        win="The opponent is motivated to avoid the costs and risk of the hearing, improving terms.",
        alternatives=[_alt("Trial preparation route", "If talks fail, effort moves to trial preparation.", "Settlement rejected")],
    ),
    "awaabs_law_deadline": MetaTemplate(
        why="An Awaab's Law deadline for the landlord is running or has passed.",
        risk="The deadline passes unnoticed and the statutory breach is never relied on.",
        stage=STAGE_NOW,
        win="Citing the statutory deadline in correspondence puts the landlord on notice of injunctive relief and aggravated damages.",
        alternatives=[_alt("Compliant landlord route", "Investigation and works within the deadlines remove the statutory point.", "Inspection report", "Works order")],
    ),
}

BEHAVIOR_TEMPLATES: Dict[str, MetaTemplate] = {
    "disclosure_request": MetaTemplate(
        why="Predicts how the opponent will react to a disclosure request, using their response history.",
        risk="The request is timed badly and its leverage is wasted.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Timing the request against predicted behaviour maximises the pressure it creates.",
    ),
    "settlement_approach": MetaTemplate(
        why="Predicts the opponent's reaction to settlement, based on their delay pattern and the hearing date.",
        risk="An offer is made at the wrong moment and anchors too low.",
        stage=STAGE_SETTLEMENT,
        win="Offers land when the opponent is most exposed.",
    ),
    "unless_order": MetaTemplate(
        why="Predicts last-minute compliance or default once an unless order is sought.",
        risk="The strongest procedural lever is held back.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Either compliance on your timetable or a route to strike-out.",
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
}

VULNERABILITY_TEMPLATES: Dict[str, MetaTemplate] = {
    "incomplete_disclosure": MetaTemplate(
        why="Disclosure from the opponent is incomplete or late.",
        risk="Relevant documents stay hidden.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Specific disclosure with costs, and adverse inferences if documents are withheld.",
    ),
    "late_response": MetaTemplate(
        why="The opponent repeatedly responds late.",
        risk="The pattern is never put before the court.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A documented pattern of delay supports unless orders and costs.",
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "missing_pre_action": MetaTemplate(
        why="The pre-action stage was not completed properly.",
        risk="The costs consequences of the protocol failure are not pursued.",
        stage=STAGE_PRE_ACTION,
        win="Costs sanctions and a poorer view of the opponent's conduct.",
    ),
    "expert_non_compliance": MetaTemplate(
        why="Expert evidence on file may not comply with CPR 35.",
        risk="Non-compliant expert evidence is admitted unchallenged.",
        stage=STAGE_PTR_TRIAL,
        win="Limits or excludes the expert evidence the opponent relies on.",
    ),
    "defective_notice": MetaTemplate(
        why="Notices served in this housing case may be defective.",
        risk="A defective notice is treated as valid.",
        stage=STAGE_PAP_PTR,
        win="A defective notice can defeat the step it was meant to support.",
    ),
    "missing_particulars": MetaTemplate(
        why="The pleaded case lacks the particulars CPR 16.4 requires.",
        risk="The case is tried against an unclear pleading.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Further information or strike-out of the unparticularised parts.",
    ),
}

STRATEGY_TEMPLATES: Dict[str, MetaTemplate] = {
    "a": MetaTemplate(
        why="The file shows clear procedural failures by the opponent (delay, missing disclosure, non-compliance) that ground procedural applications.",
        risk="Procedural failures are never exploited and the chance of costs, unless orders or strike-out is lost.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Costs, unless orders or strike-out; the procedural advantage can force settlement.",
        triggers=["Opponent delays detected", "Non-compliance identified"],
        alternatives=[
            _alt("Settlement-focused route", "A compliant opponent moves the case to settlement negotiation.",
                 "Opponent compliance", "Responsive communication"),
            _alt("Substantive challenge route", "With procedure regularised the case turns on the merits.",
                 "Procedural compliance", "Complete disclosure"),
        ],
        variants={"criminal": _PROCEDURAL_CRIMINAL},
    ),
    "b": MetaTemplate(
        why="Hazards in a social housing case engage Awaab's Law, giving a strong statutory position.",
        risk="The statutory framework is not used and a significant advantage is lost.",
        stage=STAGE_PAP_PTR,
        win="Statutory support, safety urgency that raises quantum, and evidence of systematic non-compliance.",
        triggers=["Awaab's Law compliance check", "Hazards identified"],
        alternatives=[
            _alt("Standard housing route", "Without Awaab's Law the case runs on standard disrepair arguments.",
                 "Private landlord confirmation", "No under-5s in property"),
        ],
    ),
    "c": MetaTemplate(
        why="The opponent's evidence contains contradictions or expert weaknesses that are powerful cross-examination material.",
        risk="Contradictions and expert weaknesses go unchallenged.",
        stage=STAGE_PTR_TRIAL,
        win="Undermines the opponent's credibility and weakens their whole case.",
        triggers=["Contradictions detected", "Expert weaknesses identified"],
        alternatives=[
            _alt("Consistent evidence route", "With consistent evidence the challenge moves to legal argument.",
                 "Consistent evidence", "Strong expert reports"),
            _alt("Mediation route", "Clarified evidence can make mediation viable.", "Evidence clarification"),
        ],
        variants={"injury": {
            "win": "Cross-examination material against causation or quantum; contradictions in medical evidence reduce damages or shift liability.",
        }},
    ),
    "d": MetaTemplate(
        why="Significant delay with a hearing approaching creates strong settlement leverage.",
        risk="The opponent prepares for trial and the chance to settle on good terms before trial costs passes.",
        stage=STAGE_SETTLEMENT,
        win="The opponent is motivated to settle to avoid trial costs and risk.",
        triggers=["Significant opponent delays", "Approaching hearing date"],
        alternatives=[_alt("Trial preparation route", "If talks fail, the case moves to full trial preparation.",
                           "Settlement rejected", "Trial confirmed")],
    ),
    "e": MetaTemplate(
        why="Several routes apply at once; combining them compounds the pressure on the opponent.",
        risk="Running the routes in isolation dilutes their effect.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Parallel procedural and evidential pressure leaves the opponent no easy answer.",
        alternatives=[_alt("Single route", "If one line of attack is resolved, the remaining route continues alone.",
                           "Issue resolution")],
    ),
    "default": MetaTemplate(
        why="No specific leverage has emerged yet, so the standard pathway keeps the case on track.",
        risk="The case drifts without a plan.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A structured pathway positions the case to exploit leverage as it appears.",
        triggers=["Case analysis", "Evidence review"],
        alternatives=[_alt("Targeted route", "New leverage unlocks a targeted route.", "New evidence", "Opponent default")],
    ),
    "cn_admission": MetaTemplate(
        why="The breach and expert evidence are strong enough to press for an early admission of liability.",
        risk="Liability is contested for longer than the evidence justifies.",
        stage=STAGE_PRE_ACTION,
        win="An early admission leaves only quantum in dispute.",
        triggers=["Substantive merits"],
        alternatives=[_alt("Liability trial route", "A denial moves the case to a liability judgment.", "Letter of Response denying liability")],
    ),
    "cn_protocol": MetaTemplate(
        why="Proceedings have not been issued, so the clinical negligence protocol is the main lever.",
        risk="The protocol period passes without a properly framed Letter of Claim.",
        stage=STAGE_PRE_ACTION,
        win="A well-evidenced Letter of Claim frames the defendant's response around your breach case.",
        alternatives=[_alt("Issued claim route", "Once issued, the court timetable takes over.", "Proceedings issued")],
    ),
    "cn_judgment": MetaTemplate(
        why="Expert support with breach or delay evidence makes a liability judgment realistic.",
        risk="A strong liability case is settled short.",
        stage=STAGE_PTR_TRIAL,
        win="A liability judgment maximises recovery and costs.",
        alternatives=[_alt("Settlement route", "A reasonable offer may make trial unnecessary.", "Acceptable offer")],
    ),
    "cn_settlement": MetaTemplate(
        why="The harm and merits support settlement on strong terms.",
        risk="Quantum is negotiated without the breach evidence behind it.",
        stage=STAGE_SETTLEMENT,
        win="Settlement leverage grounded in breach and harm.",
        alternatives=[_alt("Trial route", "A low offer moves the case to trial.", "Offer rejected")],
    ),
}

SCENARIO_TEMPLATES: Dict[str, MetaTemplate] = {
    "disclosure": MetaTemplate(
        why="Proceedings are issued, so disclosure can be challenged through the court.",
        risk="Disclosure is left to the opponent's timetable.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A disclosure order on a fixed timetable.",
    ),
    "direction": MetaTemplate(
        why="The opponent's silence justifies asking the court for directions.",
        risk="The delay continues without judicial control.",
        stage=STAGE_NOW,
        win="Court-imposed deadlines with consequences.",
    ),
    "settlement": MetaTemplate(
        why="Delay and an approaching hearing make settlement likely.",
        risk="The settlement window closes.",
        stage=STAGE_SETTLEMENT,
        win="Resolution before the costs of the hearing.",
    ),
}

JUDICIAL_TEMPLATES: Dict[str, MetaTemplate] = {
    "pre_action": MetaTemplate(
        why="Judges expect pre-action protocol compliance before proceedings are issued.",
        risk="Costs sanctions and an unfavourable view of the case.",
        stage=STAGE_PRE_ACTION,
        win="Shows procedural compliance, which protects your costs position.",
        triggers=["Pre-action protocol requirements"],
        alternatives=[_alt("Post-issue route", "The case can proceed without the protocol, with costs risk.", "Proceedings issued")],
    ),
    "chronology": MetaTemplate(
        why="Judges expect a clear, structured chronology to follow the case.",
        risk="The court struggles with the sequence of events.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A clear chronology shows thorough preparation and frames the facts your way.",
        triggers=["Timeline analysis"],
        alternatives=[_alt("Narrative route", "Without a chronology the case leans on narrative statements.", "Narrative statements")],
    ),
    "disclosure": MetaTemplate(
        why="Judges expect proper disclosure under CPR 31.10.",
        risk="Disclosure orders, costs sanctions and a poor view of the case.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Demonstrates compliance with disclosure obligations.",
        triggers=["CPR 31.10 requirements"],
        alternatives=[_alt("Limited disclosure route", "Agreed limited disclosure can replace full disclosure.",
                           "Limited disclosure agreement", "Court order")],
    ),
    "directions": MetaTemplate(
        why="Judges expect strict compliance with directions and deadlines.",
        risk="Sanctions with relief only under CPR 3.9.",
        stage=STAGE_NOW,
        win="A clean compliance record keeps the court on your side.",
    ),
    "trial_bundle": MetaTemplate(
        why="Judges expect a properly prepared trial bundle.",
        risk="Adjournment or a costs order.",
        stage=STAGE_PTR,
        win="A clear bundle makes your case easy for the judge to follow.",
    ),
}

GENERIC_TEMPLATES: Dict[InsightKind, MetaTemplate] = {
    InsightKind.LEVERAGE: MetaTemplate(
        why="This procedural leverage point comes from the opponent's conduct in this case.",
        risk="A tactical advantage is lost and non-compliance continues.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Grounds for court orders or costs that create settlement pressure.",
        triggers=["Case documents", "Timeline analysis"],
        alternatives=[_alt("Standard litigation route", "Once resolved, the case follows the standard stages.",
                           "Opponent compliance", "Issue resolution")],
    ),
    InsightKind.WEAK_SPOT: MetaTemplate(
        why="This weakness was identified from the evidence and documents on file.",
        risk="The opponent's position strengthens if the weakness is not challenged.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A legitimate line of challenge that strengthens your position.",
        triggers=["Case analysis", "Evidence review"],
        alternatives=[_alt("Strong opponent case route", "If addressed, the case proceeds against a stronger opponent position.",
                           "Opponent evidence update", "Issue resolution")],
    ),
    InsightKind.COMPLIANCE: MetaTemplate(
        why="A procedural rule has not been complied with.",
        risk="The breach passes without consequence.",
        stage=STAGE_CASE_MANAGEMENT,
        win="The application the breach supports.",
    ),
    InsightKind.TIME_PRESSURE: MetaTemplate(
        why="Timing in this case creates an advantage if acted on at the right moment.",
        risk="The best window for action is missed.",
        stage=STAGE_ASAP,
        win="Acting at the right moment maximises tactical advantage.",
        triggers=["Deadline analysis", "Timing review"],
        alternatives=[_alt("Extended timeline route", "Extended deadlines change the timing pressure.",
                           "Deadline extension", "Court order")],
    ),
    InsightKind.BEHAVIOR: MetaTemplate(
        why="Predicted from the opponent's response history in this case.",
        risk="Actions are timed without regard to how the opponent behaves.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Timing actions against predicted behaviour increases their effect.",
        triggers=["Opponent response history"],
    ),
    InsightKind.VULNERABILITY: MetaTemplate(
        why="A structural weakness in the opponent's position.",
        risk="The weakness is not exploited.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Raises the cost to the opponent of continuing to contest the case.",
    ),
    InsightKind.STRATEGY: MetaTemplate(
        why="This route fits the circumstances and strengths of this case.",
        risk="The most effective strategy is not pursued.",
        stage=STAGE_CASE_MANAGEMENT,
        win="A structured approach that maximises the chance of a favourable outcome.",
        triggers=["Case analysis", "Evidence review"],
        alternatives=[_alt("Alternative strategic route", "Changed circumstances can make another route better.",
                           "New evidence", "Changed circumstances")],
    ),
    InsightKind.SCENARIO: MetaTemplate(
        why="Maps how the case is likely to move if this step is taken.",
        risk="The step is taken without anticipating the procedural consequences.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Knowing the likely sequence lets you plan the next move in advance.",
    ),
    InsightKind.JUDICIAL: MetaTemplate(
        why="Based on standard judicial practice at this stage.",
        risk="Costs sanctions and an unfavourable view of the case.",
        stage=STAGE_CASE_MANAGEMENT,
        win="Meeting judicial expectations strengthens your standing with the court.",
        triggers=["Judicial standards", "Case stage requirements"],
        alternatives=[_alt("Alternative compliance route", "The court may permit another way of meeting this.",
                           "Court permission")],
    ),
}

FALLBACK_TEMPLATE = MetaTemplate(
    why="Identified from the documents, timeline and correspondence in this case.",
    risk="An opportunity to strengthen the case may be missed.",
    stage=STAGE_CASE_MANAGEMENT,
    win="Keeps the case moving towards a favourable outcome.",
    triggers=["Case analysis"],
)

TEMPLATES: Dict[InsightKind, Dict[str, MetaTemplate]] = {
    InsightKind.LEVERAGE: LEVERAGE_TEMPLATES,
    InsightKind.WEAK_SPOT: WEAK_SPOT_TEMPLATES,
    InsightKind.COMPLIANCE: COMPLIANCE_TEMPLATES,
    InsightKind.TIME_PRESSURE: TIME_PRESSURE_TEMPLATES,
    InsightKind.BEHAVIOR: BEHAVIOR_TEMPLATES,
    InsightKind.VULNERABILITY: VULNERABILITY_TEMPLATES,
    InsightKind.STRATEGY: STRATEGY_TEMPLATES,
    InsightKind.SCENARIO: SCENARIO_TEMPLATES,
    InsightKind.JUDICIAL: JUDICIAL_TEMPLATES,
}


def select_template(kind: Any, type_key: Any) -> MetaTemplate:
    """Exact (kind, key) template, else the kind's generic one, else the catch-all"""
    try:
        kind = InsightKind(getattr(kind, "value", kind))
    except ValueError:
        return FALLBACK_TEMPLATE
    key = str(getattr(type_key, "value", type_key) or "").lower()
    table = TEMPLATES.get(kind, {})
    if key in table:
        return table[key]
    return GENERIC_TEMPLATES.get(kind, FALLBACK_TEMPLATE)


def _area_tag(ctx: Optional[DetectorContext]) -> Optional[str]:
    if ctx is None:
        return None
    if ctx.is_criminal:
        return "criminal"
    if ctx.is_injury_claim:
        return "injury"
    if ctx.is_housing:
        return "housing"
    return None


# =============================================================================
# Generator
# =============================================================================

class MetaGenerator:
    """Builds StrategicInsightMeta for the insights of one case"""

    def __init__(self, ctx: Optional[DetectorContext] = None,
                 vulnerabilities: Sequence[OpponentVulnerability] = ()):
        self.ctx = ctx
        self.vulnerabilities = list(vulnerabilities)

    def generate(
        self,
        kind: Any,
        type_key: Any,
        description: str = "",
        evidence: Optional[Sequence[str]] = None,
        status: Optional[ExpectationStatus] = None,
    ) -> StrategicInsightMeta:
        template = select_template(kind, type_key)
        text = template.resolve(_area_tag(self.ctx))
        key = str(getattr(type_key, "value", type_key) or "").lower()
        kind_value = getattr(kind, "value", kind)

        triggered_by = list(evidence or [])
        triggered_by.extend(template.triggers)
        triggered_by.extend(self._case_triggers(kind_value, key))
        if not triggered_by and description:
            triggered_by.append(description)

        alternatives = list(template.alternatives)
        if kind_value == InsightKind.WEAK_SPOT.value and key == "missing_evidence" and self.ctx:
            unlock = [f"Upload {m.label}" for m in self.ctx.substantive_missing]
            if unlock:
                alternatives = [_alt("Complete evidence route",
                                     "With the missing evidence on file the case is judged on its full strength.",
                                     *unlock)]

        why = text["why"]
        risk = text["risk"]
        if status is not None:
            if status == ExpectationStatus.MET:
                why = f"{why} Your file already shows this."
                risk = "Maintaining compliance is important."
            else:
                why = f"{why} Your file does not yet show this; addressing it will strengthen the case."

        return StrategicInsightMeta(
            why_recommended=why,
            triggered_by=dedupe_strings(triggered_by),
            alternatives=alternatives,
            risk_if_ignored=risk,
            best_stage_to_use=text["stage"],
            how_this_helps_you_win=text["win"],
        )

    def _case_triggers(self, kind: str, key: str) -> List[str]:
        ctx = self.ctx
        if ctx is None:
            return []
        triggers: List[str] = []
        if kind == InsightKind.LEVERAGE.value and key == "late_response" and ctx.material.letters:
            last = max(ctx.material.letters, key=lambda l: l.created_at)
            triggers.append(f"Last letter sent: {last.created_at.date().isoformat()}")
        if key == "missing_pre_action" and ctx.is_housing:
            triggers.append("Awaab's Law compliance check")
        if kind == InsightKind.WEAK_SPOT.value and key == "contradiction":
            triggers.extend(f"Contradiction: {c.description}" for c in ctx.contradictions)
        if kind == InsightKind.WEAK_SPOT.value and key == "missing_evidence":
            triggers.extend(f"Missing: {m.label}" for m in ctx.substantive_missing)
        if kind == InsightKind.STRATEGY.value and key == "a":
            triggers.extend(v.description for v in self.vulnerabilities)
        if kind == InsightKind.STRATEGY.value and key == "d" and ctx.material.next_hearing_date:
            triggers.append(f"Next hearing: {ctx.material.next_hearing_date.date().isoformat()}")
        return triggers

    # -------------------------------------------------------------------------
    # Per-insight helpers
    # -------------------------------------------------------------------------

    def annotate(self, item: Any, kind: InsightKind) -> Any:
        """Copy of an insight model with meta filled in"""
        key, description, evidence, status = _INSIGHT_FIELDS[kind](item)
        meta = self.generate(kind, key, description, evidence, status)
        return item.model_copy(update={"meta": meta})

    def annotate_all(self, items: Sequence[Any], kind: InsightKind) -> List[Any]:
        return [self.annotate(item, kind) for item in items]


def _scenario_key(item) -> str:
    return item.id.rsplit("-", 1)[-1]


def _judicial_fields(item: JudicialExpectation):
    return item.category, item.expectation, item.evidence, item.status


_INSIGHT_FIELDS: Dict[InsightKind, Callable[[Any], tuple]] = {
    InsightKind.LEVERAGE: lambda i: (i.type, i.description, i.evidence, None),
    InsightKind.WEAK_SPOT: lambda i: (i.type, i.description, i.evidence, None),
    InsightKind.COMPLIANCE: lambda i: (i.suggested_application, i.breach, i.evidence, None),
    InsightKind.TIME_PRESSURE: lambda i: (i.issue, i.description, [], None),
    InsightKind.BEHAVIOR: lambda i: (i.pattern, i.action, [], None),
    InsightKind.VULNERABILITY: lambda i: (i.type, i.description, i.evidence, None),
    InsightKind.STRATEGY: lambda i: (i.route, i.title, [], None),
    InsightKind.SCENARIO: lambda i: (_scenario_key(i), i.title, [], None),
    InsightKind.JUDICIAL: _judicial_fields,
}


def generate_meta(
    kind: Any,
    type_key: Any,
    ctx: Optional[DetectorContext] = None,
    description: str = "",
    evidence: Optional[Sequence[str]] = None,
) -> StrategicInsightMeta:
    """Convenience wrapper"""
    return MetaGenerator(ctx).generate(kind, type_key, description, evidence)


def attach_meta(analysis: StrategicAnalysis, ctx: Optional[DetectorContext] = None) -> StrategicAnalysis:
    """Return a copy of the analysis with meta on every insight"""
    gen = MetaGenerator(ctx, analysis.vulnerabilities)
    updates: Dict[str, Any] = {
        "leverage_points": gen.annotate_all(analysis.leverage_points, InsightKind.LEVERAGE),
        "weak_spots": gen.annotate_all(analysis.weak_spots, InsightKind.WEAK_SPOT),
        "compliance_issues": gen.annotate_all(analysis.compliance_issues, InsightKind.COMPLIANCE),
        "time_pressure": gen.annotate_all(analysis.time_pressure, InsightKind.TIME_PRESSURE),
        "behavior_predictions": gen.annotate_all(analysis.behavior_predictions, InsightKind.BEHAVIOR),
        "vulnerabilities": gen.annotate_all(analysis.vulnerabilities, InsightKind.VULNERABILITY),
        "strategy_paths": gen.annotate_all(analysis.strategy_paths, InsightKind.STRATEGY),
        "scenarios": gen.annotate_all(analysis.scenarios, InsightKind.SCENARIO),
    }
    if analysis.judicial is not None:
        updates["judicial"] = analysis.judicial.model_copy(update={
            "expectations": gen.annotate_all(analysis.judicial.expectations, InsightKind.JUDICIAL),
        })
    logger.debug(f"Meta attached for case {analysis.case_id}")
    return analysis.model_copy(update=updates)
