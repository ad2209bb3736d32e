"""GraphQL documents understood by the service.

The documents mirror what the Android app sends; fragments are kept inline
so each operation is self-contained.
"""

NEW_SESSION = (
    "mutation NewSession($input: SessionInput) { generateSession(session: $input) { "
    "__typename ...SessionPayload failures { type message } } }  "
    "fragment SessionPayload on SetSessionPayload { accessToken refreshToken "
    "customerId customerOrderId customerOrderState defaultBranchId expiresIn }"
)

DELETE_SESSION = "mutation DeleteSession { deleteSession }"

GET_SHOPPING_CONTEXT = (
    "query GetShoppingContext { shoppingContext { customerId customerOrderId "
    "customerOrderState defaultBranchId } }"
)

GET_ACCOUNT_INFO_AND_MEMBERSHIP = (
    "query GetAccountInfoAndMembership { getAccountProfile { id email contactAddress "
    "{ __typename ...ContactAddress } } getMemberships { memberships { number type } "
    "} }  "
    "fragment Addressee on Addressee { title firstName lastName contactNumber }  "
    "fragment ContactAddress on Address { id line1 line2 line3 town region country "
    "postalCode addressee { __typename ...Addressee } }"
)

GET_TROLLEY = (
    "query GetTrolley($orderId: ID!) { getTrolley(orderId: $orderId) { "
    "checkoutReadiness { __typename ...CheckoutReadiness } products { __typename "
    "...TrolleyProduct } slotChangeable trolley { __typename ...TrolleyResponse } "
    "instantCheckout failures { __typename ...TrolleyFailure } } }  "
    "fragment CheckoutReadiness on CheckoutReadiness { slotTypeValid }  "
    "fragment TrolleyProductCategory on TrolleyProductCategory { id name }  "
    "fragment TrolleyPrice on Price { amount currencyCode }  "
    "fragment Quantity on Quantity { amount uom }  "
    "fragment QuantityPrice on QuantityPrice { price { __typename ...TrolleyPrice } "
    "quantity { __typename ...Quantity } }  "
    "fragment Hfss on Hfss { status }  "
    "fragment ProductImage on ProductImage { extraLarge large medium small }  "
    "fragment Group on Group { name }  "
    "fragment TrolleyProductPromotion on TrolleyProductPromotion { groups { "
    "__typename ...Group } myWaitrosePromotion promotionDescription "
    "promotionExpiryDate promotionId promotionTypeCode promotionUnitPrice { "
    "__typename ...TrolleyPrice } promotionalPricePerUnit discount { type } hidden } "
    " "
    "fragment AvailableDate on AvailableDate { startDate endDate }  "
    "fragment Restriction on Restriction { availableDates { __typename "
    "...AvailableDate } }  "
    "fragment ProductReview on ProductReview { averageRating reviewCount }  "
    "fragment ProductServings on ProductServings { max min }  "
    "fragment ProductWeight on ProductWeight { uoms }  "
    "fragment TrolleyProduct on TrolleyProduct { categories { __typename "
    "...TrolleyProductCategory } currentSaleUnitPrice { __typename ...QuantityPrice "
    "} defaultQuantity { __typename ...Quantity } displayPrice displayPriceEstimated "
    "displayPriceQualifier formattedPriceRange formattedWeightRange hfss { "
    "__typename ...Hfss } id leadTime lineNumber maxPersonalisedMessageLength name "
    "brandName productImageUrls { __typename ...ProductImage } productType "
    "promotions { __typename ...TrolleyProductPromotion } restriction { __typename "
    "...Restriction } reviews { __typename ...ProductReview } servings { __typename "
    "...ProductServings } substitutionsProhibited size thumbnail weights { "
    "__typename ...ProductWeight } depositCharge { __typename ...TrolleyPrice } }  "
    "fragment SlotOptionDatesType on SlotOptionDatesType { date type }  "
    "fragment Conflict on Conflict { productId lineNumber messages priority "
    "outOfStock resolutionActions prohibitedActions itemId type slotOptionDates { "
    "__typename ...SlotOptionDatesType } }  "
    "fragment TrolleyItem on TrolleyItem { canSubstitute lineNumber noteToShopper "
    "personalisedMessage quantity { __typename ...Quantity } reservedQuantity "
    "totalPrice { __typename ...TrolleyPrice } triggeredPromotions trolleyItemId "
    "untriggeredPromotions }  "
    "fragment TrolleyItemCounts on TrolleyItemCounts { hardConflicts noConflicts "
    "softConflicts }  "
    "fragment TrolleyTotals on TrolleyTotals { collectionMinimumOrderValue { "
    "__typename ...TrolleyPrice } deliveryCharge { __typename ...TrolleyPrice } "
    "deliveryMinimumOrderValue { __typename ...TrolleyPrice } itemTotalEstimatedCost "
    "{ __typename ...TrolleyPrice } minimumSpendThresholdMet savingsFromOffers { "
    "__typename ...TrolleyPrice } savingsFromMyWaitrose { __typename ...TrolleyPrice "
    "} totalDepositCharge { __typename ...TrolleyPrice } totalEstimatedCost { "
    "__typename ...TrolleyPrice } trolleyItemCounts { __typename "
    "...TrolleyItemCounts } }  "
    "fragment TrolleyResponse on TrolleyResponse { amendingOrder conflicts { "
    "__typename ...Conflict } orderId trolleyItems { __typename ...TrolleyItem } "
    "trolleyTotals { __typename ...TrolleyTotals } }  "
    "fragment TrolleyFailure on TrolleyFailure { message type }"
)

UPDATE_TROLLEY_ITEMS = (
    "mutation UpdateTrolleyItems($trolleyItemsInput: [TrolleyItemInput!], $orderId: "
    "ID!) { updateTrolleyItems(trolleyItems: $trolleyItemsInput, orderId: $orderId) "
    "{ products { __typename ...TrolleyProduct } trolley { __typename "
    "...TrolleyResponse } instantCheckout failures { __typename ...TrolleyFailure } "
    "} }  "
    "fragment TrolleyProductCategory on TrolleyProductCategory { id name }  "
    "fragment TrolleyPrice on Price { amount currencyCode }  "
    "fragment Quantity on Quantity { amount uom }  "
    "fragment QuantityPrice on QuantityPrice { price { __typename ...TrolleyPrice } "
    "quantity { __typename ...Quantity } }  "
    "fragment Hfss on Hfss { status }  "
    "fragment ProductImage on ProductImage { extraLarge large medium small }  "
    "fragment Group on Group { name }  "
    "fragment TrolleyProductPromotion on TrolleyProductPromotion { groups { "
    "__typename ...Group } myWaitrosePromotion promotionDescription "
    "promotionExpiryDate promotionId promotionTypeCode promotionUnitPrice { "
    "__typename ...TrolleyPrice } promotionalPricePerUnit discount { type } hidden } "
    " "
    "fragment AvailableDate on AvailableDate { startDate endDate }  "
    "fragment Restriction on Restriction { availableDates { __typename "
    "...AvailableDate } }  "
    "fragment ProductReview on ProductReview { averageRating reviewCount }  "
    "fragment ProductServings on ProductServings { max min }  "
    "fragment ProductWeight on ProductWeight { uoms }  "
    "fragment TrolleyProduct on TrolleyProduct { categories { __typename "
    "...TrolleyProductCategory } currentSaleUnitPrice { __typename ...QuantityPrice "
    "} defaultQuantity { __typename ...Quantity } displayPrice displayPriceEstimated "
    "displayPriceQualifier formattedPriceRange formattedWeightRange hfss { "
    "__typename ...Hfss } id leadTime lineNumber maxPersonalisedMessageLength name "
    "brandName productImageUrls { __typename ...ProductImage } productType "
    "promotions { __typename ...TrolleyProductPromotion } restriction { __typename "
    "...Restriction } reviews { __typename ...ProductReview } servings { __typename "
    "...ProductServings } substitutionsProhibited size thumbnail weights { "
    "__typename ...ProductWeight } depositCharge { __typename ...TrolleyPrice } }  "
    "fragment SlotOptionDatesType on SlotOptionDatesType { date type }  "
    "fragment Conflict on Conflict { productId lineNumber messages priority "
    "outOfStock resolutionActions prohibitedActions itemId type slotOptionDates { "
    "__typename ...SlotOptionDatesType } }  "
    "fragment TrolleyItem on TrolleyItem { canSubstitute lineNumber noteToShopper "
    "personalisedMessage quantity { __typename ...Quantity } reservedQuantity "
    "totalPrice { __typename ...TrolleyPrice } triggeredPromotions trolleyItemId "
    "untriggeredPromotions }  "
    "fragment TrolleyItemCounts on TrolleyItemCounts { hardConflicts noConflicts "
    "softConflicts }  "
    "fragment TrolleyTotals on TrolleyTotals { collectionMinimumOrderValue { "
    "__typename ...TrolleyPrice } deliveryCharge { __typename ...TrolleyPrice } "
    "deliveryMinimumOrderValue { __typename ...TrolleyPrice } itemTotalEstimatedCost "
    "{ __typename ...TrolleyPrice } minimumSpendThresholdMet savingsFromOffers { "
    "__typename ...TrolleyPrice } savingsFromMyWaitrose { __typename ...TrolleyPrice "
    "} totalDepositCharge { __typename ...TrolleyPrice } totalEstimatedCost { "
    "__typename ...TrolleyPrice } trolleyItemCounts { __typename "
    "...TrolleyItemCounts } }  "
    "fragment TrolleyResponse on TrolleyResponse { amendingOrder conflicts { "
    "__typename ...Conflict } orderId trolleyItems { __typename ...TrolleyItem } "
    "trolleyTotals { __typename ...TrolleyTotals } }  "
    "fragment TrolleyFailure on TrolleyFailure { message type }"
)

EMPTY_TROLLEY = (
    "mutation EmptyTrolley($orderId: ID!) { emptyTrolley(orderId: $orderId) { "
    "products { __typename ...TrolleyProduct } trolley { __typename "
    "...TrolleyResponse } instantCheckout failures { __typename ...TrolleyFailure } "
    "} }  "
    "fragment TrolleyProductCategory on TrolleyProductCategory { id name }  "
    "fragment TrolleyPrice on Price { amount currencyCode }  "
    "fragment Quantity on Quantity { amount uom }  "
    "fragment QuantityPrice on QuantityPrice { price { __typename ...TrolleyPrice } "
    "quantity { __typename ...Quantity } }  "
    "fragment Hfss on Hfss { status }  "
    "fragment ProductImage on ProductImage { extraLarge large medium small }  "
    "fragment Group on Group { name }  "
    "fragment TrolleyProductPromotion on TrolleyProductPromotion { groups { "
    "__typename ...Group } myWaitrosePromotion promotionDescription "
    "promotionExpiryDate promotionId promotionTypeCode promotionUnitPrice { "
    "__typename ...TrolleyPrice } promotionalPricePerUnit discount { type } hidden } "
    " "
    "fragment AvailableDate on AvailableDate { startDate endDate }  "
    "fragment Restriction on Restriction { availableDates { __typename "
    "...AvailableDate } }  "
    "fragment ProductReview on ProductReview { averageRating reviewCount }  "
    "fragment ProductServings on ProductServings { max min }  "
    "fragment ProductWeight on ProductWeight { uoms }  "
    "fragment TrolleyProduct on TrolleyProduct { categories { __typename "
    "...TrolleyProductCategory } currentSaleUnitPrice { __typename ...QuantityPrice "
    "} defaultQuantity { __typename ...Quantity } displayPrice displayPriceEstimated "
    "displayPriceQualifier formattedPriceRange formattedWeightRange hfss { "
    "__typename ...Hfss } id leadTime lineNumber maxPersonalisedMessageLength name "
    "brandName productImageUrls { __typename ...ProductImage } productType "
    "promotions { __typename ...TrolleyProductPromotion } restriction { __typename "
    "...Restriction } reviews { __typename ...ProductReview } servings { __typename "
    "...ProductServings } substitutionsProhibited size thumbnail weights { "
    "__typename ...ProductWeight } depositCharge { __typename ...TrolleyPrice } }  "
    "fragment SlotOptionDatesType on SlotOptionDatesType { date type }  "
    "fragment Conflict on Conflict { productId lineNumber messages priority "
    "outOfStock resolutionActions prohibitedActions itemId type slotOptionDates { "
    "__typename ...SlotOptionDatesType } }  "
    "fragment TrolleyItem on TrolleyItem { canSubstitute lineNumber noteToShopper "
    "personalisedMessage quantity { __typename ...Quantity } reservedQuantity "
    "totalPrice { __typename ...TrolleyPrice } triggeredPromotions trolleyItemId "
    "untriggeredPromotions }  "
    "fragment TrolleyItemCounts on TrolleyItemCounts { hardConflicts noConflicts "
    "softConflicts }  "
    "fragment TrolleyTotals on TrolleyTotals { collectionMinimumOrderValue { "
    "__typename ...TrolleyPrice } deliveryCharge { __typename ...TrolleyPrice } "
    "deliveryMinimumOrderValue { __typename ...TrolleyPrice } itemTotalEstimatedCost "
    "{ __typename ...TrolleyPrice } minimumSpendThresholdMet savingsFromOffers { "
    "__typename ...TrolleyPrice } savingsFromMyWaitrose { __typename ...TrolleyPrice "
    "} totalDepositCharge { __typename ...TrolleyPrice } totalEstimatedCost { "
    "__typename ...TrolleyPrice } trolleyItemCounts { __typename "
    "...TrolleyItemCounts } }  "
    "fragment TrolleyResponse on TrolleyResponse { amendingOrder conflicts { "
    "__typename ...Conflict } orderId trolleyItems { __typename ...TrolleyItem } "
    "trolleyTotals { __typename ...TrolleyTotals } }  "
    "fragment TrolleyFailure on TrolleyFailure { message type }"
)

GET_PENDING_ORDERS = (
    "query GetPendingOrders($getPendingOrdersInput: GetOrdersInput) { pendingOrders: "
    "getOrders(getOrdersInput: $getPendingOrdersInput) { content { __typename "
    "...Order } links { rel title href } } }  "
    "fragment Price on OrderPrice { amount currencyCode }  "
    "fragment OrderAddress on OrderAddress { id line1 line2 line3 postalCode town "
    "region country }  "
    "fragment OrderSlot on OrderSlot { branchId branchName branchAddress { "
    "__typename ...OrderAddress } type startDateTime endDateTime "
    "amendOrderCutoffDateTime deliveryAddress { __typename ...OrderAddress } status "
    "}  "
    "fragment Order on OrderContent { customerOrderId status created lastUpdated "
    "links { rel title href } totals { estimated { totalPrice { __typename ...Price "
    "} toPay { __typename ...Price } } actual { paid { __typename ...Price } } } "
    "slots { __typename ...OrderSlot } containsEntertainingLines orderLines { "
    "lineNumber } }"
)

GET_PREVIOUS_ORDERS = (
    "query GetPreviousOrders($getPreviousOrdersInput: GetOrdersInput) { "
    "previousOrders: getOrders(getOrdersInput: $getPreviousOrdersInput) { content { "
    "__typename ...Order } links { rel title href } } }  "
    "fragment Price on OrderPrice { amount currencyCode }  "
    "fragment OrderAddress on OrderAddress { id line1 line2 line3 postalCode town "
    "region country }  "
    "fragment OrderSlot on OrderSlot { branchId branchName branchAddress { "
    "__typename ...OrderAddress } type startDateTime endDateTime "
    "amendOrderCutoffDateTime deliveryAddress { __typename ...OrderAddress } status "
    "}  "
    "fragment Order on OrderContent { customerOrderId status created lastUpdated "
    "links { rel title href } totals { estimated { totalPrice { __typename ...Price "
    "} toPay { __typename ...Price } } actual { paid { __typename ...Price } } } "
    "slots { __typename ...OrderSlot } containsEntertainingLines orderLines { "
    "lineNumber } }"
)

GET_ORDER = (
    "query GetOrder($customerOrderId: String) { getOrder(customerOrderId: "
    "$customerOrderId) { customerOrderId status created lastUpdated orderLines { "
    "__typename ...OrderLine } slots { __typename ...OrderSlot } "
    "containsEntertainingLines substitutionsAllowed bagless paperStatement links { "
    "rel title href } totals { actual { paid { __typename ...Price } savings { "
    "__typename ...Price } carrierBagCharge { __typename ...Price } deliveryCharge { "
    "__typename ...Price } depositCharge { __typename ...Price } offerSavings { "
    "__typename ...Price } partnerDiscountSavings { __typename ...Price } "
    "membershipSavings { __typename ...Price } pickedPrice { __typename ...Price } } "
    "estimated { giftCards { __typename ...Price } giftVouchers { __typename "
    "...Price } paymentCard { __typename ...Price } carrierBagCharge { __typename "
    "...Price } deliveryCharge { __typename ...Price } depositCharge { __typename "
    "...Price } orderLines { __typename ...Price } offerSavings { __typename "
    "...Price } membershipSavings { __typename ...Price } incentiveSavings { "
    "__typename ...Price } totalSavings { __typename ...Price } totalPrice { "
    "__typename ...Price } toPay { __typename ...Price } } } paymentInfo { giftCards "
    "{ __typename ...OrderGiftCard } giftVouchers { __typename ...OrderGiftVoucher } "
    "cardPayment { __typename ...CardPayment } } } }  "
    "fragment Quantity on Quantity { amount uom }  "
    "fragment Price on OrderPrice { amount currencyCode }  "
    "fragment PersonalisedMessage on PersonalisedInfo { message }  "
    "fragment OrderLine on OrderLine { lineNumber orderLineStatus estimatedQuantity "
    "{ __typename ...Quantity } quantity { __typename ...Quantity } "
    "estimatedUnitPrice { __typename ...Price } estimatedTotalPrice { __typename "
    "...Price } estimatedDepositCharge { __typename ...Price } estimatedPrice { "
    "__typename ...Price } price { __typename ...Price } unitPrice { __typename "
    "...Price } depositCharge { __typename ...Price } totalPrice { __typename "
    "...Price } substitutionAllowed noteToShopper personalisedInfos { __typename "
    "...PersonalisedMessage } }  "
    "fragment OrderAddress on OrderAddress { id line1 line2 line3 postalCode town "
    "region country }  "
    "fragment OrderSlot on OrderSlot { branchId branchName branchAddress { "
    "__typename ...OrderAddress } type startDateTime endDateTime "
    "amendOrderCutoffDateTime deliveryAddress { __typename ...OrderAddress } status "
    "}  "
    "fragment OrderGiftCard on OrderGiftCard { serialNumber remainingBalance { "
    "__typename ...Price } amountToDeduct { __typename ...Price } }  "
    "fragment OrderGiftVoucher on OrderGiftVoucher { serialNumber status value { "
    "__typename ...Price } }  "
    "fragment CardPayment on CardPayment { cardType cardholderName maskedCardNumber "
    "startDate expiryDate businessAccount billingAddress { __typename "
    "...OrderAddress } }"
)

CANCEL_ORDER = (
    "mutation CancelOrder($input: ID!) { cancelOrder(customerOrderId: $input) { "
    "failures { __typename ...OrderFailure } } }  "
    "fragment OrderFailure on OrderFailure { type message }"
)

INITIATE_AMEND_ORDER = (
    "mutation InitiateAmendOrder($input: ID!) { amendOrder(customerOrderId: $input) "
    "{ failures { __typename ...OrderFailure } } }  "
    "fragment OrderFailure on OrderFailure { type message }"
)

CANCEL_AMEND_ORDER = (
    "mutation CancelAmendOrder($input: ID!) { cancelAmendOrder(customerOrderId: "
    "$input) { failures { __typename ...OrderFailure } } }  "
    "fragment OrderFailure on OrderFailure { type message }"
)

CURRENT_SLOT = (
    "query CurrentSlot($input: CurrentSlotInput) { currentSlot(currentSlotInput: "
    "$input) { slotType branchId addressId postcode startDateTime endDateTime "
    "expiryDateTime orderCutoffDateTime amendOrderCutoffDateTime shopByDateTime "
    "deliveryCharge { amount currencyCode } slotGridType } }"
)

SLOT_DATES = (
    "query SlotDates($slotDatesInput: SlotDatesInput) { slotDates(slotDatesInput: "
    "$slotDatesInput) { content { id dayOfWeek } failures { message type } } }"
)

SLOT_DAYS = (
    "query SlotDays($slotDaysInput: SlotDaysInput) { slotDays(slotDaysInput: "
    "$slotDaysInput) { content { id branchId slotType date slots { id startDateTime "
    "endDateTime shopByDateTime status slotGridType charge { currencyCode amount } "
    "greenSlot deliveryPassSlot } } failures { message type } variant } }"
)

BOOK_SLOT = (
    "mutation BookSlot($input: BookSlotInput) { bookSlot(bookSlotInput: $input) { "
    "slotExpiryDateTime orderCutoffDateTime amendOrderCutoffDateTime shopByDateTime "
    "failures { type message } variant } }"
)

GET_CAMPAIGNS = (
    "query GetCampaigns { campaigns { id name marketingStartDate marketingEndDate "
    "startDate endDate } }"
)
